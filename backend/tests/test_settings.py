"""
Settings, business profile, user management and registry tests.

Verifies:
- Settings defaults, admin-only updates and their effect on billing
- Manager accounts are created inside the admin's business
- Customer and supplier CRUD with delete guards
- CLI bootstrap of a new business
"""

from stockflow.extensions import db
from stockflow.models import Business, Customer, Settings, Supplier, User

from conftest import PASSWORD, count


class TestSettings:

    def test_defaults(self, client, admin_headers):
        resp = client.get("/api/v1/settings", headers=admin_headers)

        assert resp.status_code == 200
        data = resp.json["data"]
        assert data["bill_prefix"] == "INV"
        assert data["low_stock_threshold_default"] == 10
        assert data["enable_overstock_alerts"] is True

    def test_created_on_first_access(self, client, db_session, admin_headers, business_a):
        db_session.query(Settings).delete()
        db_session.commit()

        resp = client.get("/api/v1/settings", headers=admin_headers)

        assert resp.status_code == 200
        assert count(Settings) == 1

    def test_update_changes_bill_prefix_and_threshold(self, client, admin_headers, product_a):
        resp = client.put(
            "/api/v1/settings",
            json={"billPrefix": "SHOP", "lowStockThresholdDefault": 3, "defaultTaxPercentage": 18},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json["data"]["default_tax_percentage"] == 18.0

        bill = client.post(
            "/api/v1/sales",
            json={"items": [{"productId": product_a.id, "quantity": 1}], "paymentMethod": "cash"},
            headers=admin_headers,
        ).json["data"]["bill"]
        assert bill["bill_number"].startswith("SHOP-")

        product = client.post(
            "/api/v1/products",
            json={"productName": "Salt", "purchasePrice": 10, "sellingPrice": 15},
            headers=admin_headers,
        ).json["data"]
        assert product["min_stock_level"] == 3

    def test_empty_update_rejected(self, client, admin_headers):
        resp = client.put("/api/v1/settings", json={}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "No update data provided"

    def test_tax_percentage_bounds(self, client, admin_headers):
        resp = client.put("/api/v1/settings", json={"defaultTaxPercentage": 150}, headers=admin_headers)
        assert resp.status_code == 400


class TestBusinessProfile:

    def test_get_and_update(self, client, admin_headers, manager_headers):
        assert client.get("/api/v1/settings/business", headers=manager_headers).status_code == 200

        resp = client.put(
            "/api/v1/settings/business",
            json={"businessName": "Acme Wholesale", "gstNumber": "29ABCDE1234F1Z5", "currency": "usd"},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json["data"]["business_name"] == "Acme Wholesale"
        assert resp.json["data"]["currency"] == "USD"


class TestUserManagement:

    def test_add_manager(self, client, admin_headers, business_a):
        resp = client.post(
            "/api/v1/settings/users",
            json={"fullName": "Store Manager", "email": "store@acme.test", "password": "manager1"},
            headers=admin_headers,
        )

        assert resp.status_code == 201
        assert resp.json["data"]["role"] == "manager"
        assert resp.json["data"]["business_id"] == business_a.id

        login = client.post("/api/v1/auth/login", json={"email": "store@acme.test", "password": "manager1"})
        assert login.status_code == 200

    def test_add_manager_duplicate_email(self, client, admin_headers, admin_b):
        resp = client.post(
            "/api/v1/settings/users",
            json={"fullName": "Dup", "email": admin_b.email, "password": PASSWORD},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_list_users_scoped(self, client, admin_headers, manager_a, admin_b):
        resp = client.get("/api/v1/settings/users", headers=admin_headers)
        emails = {u["email"] for u in resp.json["data"]}
        assert emails == {"admin@acme.test", "manager@acme.test"}

    def test_list_users_other_business(self, client, admin_b_headers, manager_b, manager_a):
        resp = client.get("/api/v1/settings/users", headers=admin_b_headers)
        emails = {u["email"] for u in resp.json["data"]}
        assert emails == {"admin@beta.test", "manager@beta.test"}

    def test_cannot_deactivate_other_business_user(self, client, admin_headers, admin_b):
        resp = client.put(f"/api/v1/settings/users/{admin_b.id}/deactivate", headers=admin_headers)
        assert resp.status_code == 404
        db.session.expire_all()
        assert db.session.get(User, admin_b.id).is_active is True


class TestCustomers:

    def test_crud(self, client, admin_headers):
        created = client.post("/api/v1/customers", json={"customerName": "Asha", "phone": "9876543210"},
                              headers=admin_headers)
        assert created.status_code == 201
        customer_id = created.json["data"]["id"]

        search = client.get("/api/v1/customers?search=987", headers=admin_headers)
        assert [c["id"] for c in search.json["data"]] == [customer_id]

        updated = client.put(f"/api/v1/customers/{customer_id}", json={"email": "ASHA@example.com"},
                             headers=admin_headers)
        assert updated.json["data"]["email"] == "asha@example.com"

        detail = client.get(f"/api/v1/customers/{customer_id}", headers=admin_headers)
        assert detail.json["data"]["recent_bills"] == []

        assert client.delete(f"/api/v1/customers/{customer_id}", headers=admin_headers).status_code == 200
        assert count(Customer) == 0

    def test_missing_phone(self, client, admin_headers):
        resp = client.post("/api/v1/customers", json={"customerName": "Asha"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Please provide customer name and phone"

    def test_customer_with_bills_cannot_be_deleted(self, client, admin_headers, product_a):
        customer_id = client.post("/api/v1/customers", json={"customerName": "Asha", "phone": "1"},
                                  headers=admin_headers).json["data"]["id"]
        client.post(
            "/api/v1/sales",
            json={"items": [{"productId": product_a.id, "quantity": 1}], "paymentMethod": "cash",
                  "customerId": customer_id},
            headers=admin_headers,
        )

        resp = client.delete(f"/api/v1/customers/{customer_id}", headers=admin_headers)

        assert resp.status_code == 400
        assert count(Customer) == 1


class TestSuppliers:

    def test_crud_and_reference_guard(self, client, admin_headers, product_a):
        created = client.post(
            "/api/v1/suppliers",
            json={"supplierName": "Fresh Farms", "phone": "080-1234", "contactPerson": "Ravi"},
            headers=admin_headers,
        )
        assert created.status_code == 201
        supplier_id = created.json["data"]["id"]

        client.put(f"/api/v1/products/{product_a.id}", json={"supplierId": supplier_id}, headers=admin_headers)

        resp = client.delete(f"/api/v1/suppliers/{supplier_id}", headers=admin_headers)
        assert resp.status_code == 400
        assert count(Supplier) == 1

        client.put(f"/api/v1/products/{product_a.id}", json={"supplierId": None}, headers=admin_headers)
        assert client.delete(f"/api/v1/suppliers/{supplier_id}", headers=admin_headers).status_code == 200
        assert count(Supplier) == 0


class TestBootstrapCommand:

    def test_create_business(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=[
            "stockflow", "create-business",
            "--name", "CLI Mart",
            "--owner", "Cli Owner",
            "--email", "owner@cli.test",
            "--password", "secret1",
        ])

        assert result.exit_code == 0, result.output
        assert "CLI Mart" in result.output
        assert count(Business) == 1
        assert count(Settings) == 1
        assert db_session.query(User).one().role == "admin"

    def test_create_business_duplicate_email(self, app, admin_a):
        result = app.test_cli_runner().invoke(args=[
            "stockflow", "create-business",
            "--name", "Again", "--owner", "Someone", "--email", admin_a.email, "--password", "secret1",
        ])
        assert result.exit_code != 0
        assert "User already exists with this email" in result.output
