"""
Authentication and authorization tests.

Verifies:
- Unauthenticated requests return 401
- Manager role denied admin-only operations (403)
- Registration, login and password reset
- Deactivated users lose access immediately
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from stockflow.models import Business, Settings, User
from stockflow.services import auth_service
from stockflow.time_utils import utcnow

from conftest import PASSWORD, count


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/v1/auth/me"),
            ("GET", "/api/v1/products"),
            ("POST", "/api/v1/products"),
            ("GET", "/api/v1/categories"),
            ("GET", "/api/v1/sales"),
            ("POST", "/api/v1/sales"),
            ("GET", "/api/v1/bills"),
            ("GET", "/api/v1/purchases"),
            ("GET", "/api/v1/barcode/lookup/123"),
            ("GET", "/api/v1/customers"),
            ("GET", "/api/v1/suppliers"),
            ("GET", "/api/v1/alerts"),
            ("GET", "/api/v1/settings"),
            ("GET", "/api/v1/dashboard/metrics"),
            ("GET", "/api/v1/reports/stock-summary"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.json["message"] == "Not authorized, no token provided"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/v1/products", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401
        assert resp.json["message"] == "Not authorized, token invalid or expired"

    def test_expired_token(self, app, client, admin_a):
        claims = {
            "userId": admin_a.id,
            "businessId": admin_a.business_id,
            "role": "admin",
            "exp": int((datetime.now(timezone.utc) - timedelta(minutes=1)).timestamp()),
        }
        token = jwt.encode(claims, app.config["JWT_SECRET"], algorithm="HS256")
        resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_forged_business_claim(self, app, client, admin_a, business_b):
        claims = {"userId": admin_a.id, "businessId": business_b.id, "role": "admin"}
        token = jwt.encode(claims, app.config["JWT_SECRET"], algorithm="HS256")
        resp = client.get("/api/v1/products", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


# =============================================================================
# MANAGER DENIED ADMIN OPERATIONS (403)
# =============================================================================


class TestManagerDeniedAdminRoutes:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("PUT", "/api/v1/settings"),
            ("PUT", "/api/v1/settings/business"),
            ("GET", "/api/v1/settings/users"),
            ("POST", "/api/v1/settings/users"),
            ("GET", "/api/v1/reports/profit-loss?startDate=2026-01-01&endDate=2026-01-31"),
        ],
    )
    def test_forbidden(self, client, manager_headers, method, path):
        resp = getattr(client, method.lower())(path, json={}, headers=manager_headers)
        assert resp.status_code == 403
        assert resp.json["message"] == "User role 'manager' is not authorized to access this route"

    def test_manager_can_read_settings(self, client, manager_headers):
        resp = client.get("/api/v1/settings", headers=manager_headers)
        assert resp.status_code == 200


# =============================================================================
# REGISTRATION AND LOGIN
# =============================================================================


class TestRegisterAndLogin:

    def test_register_creates_business_admin_and_settings(self, client, db_session):
        resp = client.post("/api/v1/auth/register", json={
            "businessName": "Corner Shop",
            "ownerName": "Meera Shah",
            "email": "Meera@Corner.test",
            "password": "secret1",
        })

        assert resp.status_code == 201, resp.json
        data = resp.json["data"]
        assert data["user"]["role"] == "admin"
        assert data["user"]["email"] == "meera@corner.test"
        assert data["business"]["currency"] == "INR"
        assert data["token"]
        assert count(Business) == 1
        assert count(Settings) == 1

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.status_code == 200
        assert me.json["data"]["business"]["business_name"] == "Corner Shop"

    def test_register_duplicate_email(self, client, admin_a):
        resp = client.post("/api/v1/auth/register", json={
            "businessName": "Other",
            "ownerName": "Someone",
            "email": admin_a.email,
            "password": "secret1",
        })
        assert resp.status_code == 400
        assert count(Business) == 1

    def test_register_missing_fields(self, client, db_session):
        resp = client.post("/api/v1/auth/register", json={"email": "x@y.test"})
        assert resp.status_code == 400
        assert resp.json["message"] == "Please provide all required fields"

    def test_register_short_password(self, client, db_session):
        resp = client.post("/api/v1/auth/register", json={
            "businessName": "B", "ownerName": "O", "email": "o@b.test", "password": "123",
        })
        assert resp.status_code == 400

    def test_login(self, client, admin_a):
        resp = client.post("/api/v1/auth/login", json={"email": admin_a.email, "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.json["data"]["token"]

    def test_login_wrong_password_is_generic(self, client, admin_a):
        wrong = client.post("/api/v1/auth/login", json={"email": admin_a.email, "password": "nope-nope"})
        unknown = client.post("/api/v1/auth/login", json={"email": "ghost@acme.test", "password": "nope-nope"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json["message"] == unknown.json["message"] == "Invalid email or password"

    def test_deactivated_user_locked_out(self, client, admin_headers, manager_a):
        manager_token = client.post(
            "/api/v1/auth/login", json={"email": manager_a.email, "password": PASSWORD}
        ).json["data"]["token"]

        resp = client.put(f"/api/v1/settings/users/{manager_a.id}/deactivate", headers=admin_headers)
        assert resp.status_code == 200

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {manager_token}"})
        assert me.status_code == 401
        login = client.post("/api/v1/auth/login", json={"email": manager_a.email, "password": PASSWORD})
        assert login.status_code == 401

    def test_admin_cannot_deactivate_self(self, client, admin_a, admin_headers):
        resp = client.put(f"/api/v1/settings/users/{admin_a.id}/deactivate", headers=admin_headers)
        assert resp.status_code == 400


class TestPasswordReset:

    def test_forgot_password_same_answer(self, client, admin_a):
        known = client.post("/api/v1/auth/forgot-password", json={"email": admin_a.email})
        unknown = client.post("/api/v1/auth/forgot-password", json={"email": "ghost@acme.test"})
        assert known.status_code == unknown.status_code == 200
        assert known.json["message"] == unknown.json["message"]

    def test_reset_with_token(self, client, db_session, admin_a):
        token = auth_service.request_password_reset(admin_a.email)

        resp = client.post("/api/v1/auth/reset-password", json={"token": token, "password": "brand-new"})
        assert resp.status_code == 200

        login = client.post("/api/v1/auth/login", json={"email": admin_a.email, "password": "brand-new"})
        assert login.status_code == 200
        # single use
        again = client.post("/api/v1/auth/reset-password", json={"token": token, "password": "another1"})
        assert again.status_code == 400

    def test_expired_reset_token(self, client, db_session, admin_a):
        token = auth_service.request_password_reset(admin_a.email)
        user = db_session.get(User, admin_a.id)
        user.reset_token_expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        resp = client.post("/api/v1/auth/reset-password", json={"token": token, "password": "brand-new"})
        assert resp.status_code == 400
