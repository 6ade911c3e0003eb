# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/stockflow/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- bcrypt password hashes, signed JWT bearer tokens
- Login failures answer with one generic message
- Forgot-password answers identically whether or not the email exists
"""

from flask import Blueprint, g, request

from ..decorators import require_auth
from ..errors import StockFlowError
from ..responses import from_error, success
from ..schemas import ForgotPasswordInput, LoginInput, RegisterInput, ResetPasswordInput
from ..services import auth_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")


@auth_bp.post("/register")
def register_route():
    """
    Register a new business and its admin user.

    Creates Business, admin User and default Settings; returns a token so the
    client is signed in immediately.
    """
    try:
        data = RegisterInput.from_json(request.get_json(silent=True))
        user, business, token = auth_service.register_business(data)
    except StockFlowError as exc:
        return from_error(exc)

    return success(
        "Business registered successfully",
        {"user": user.to_dict(), "business": business.to_dict(), "token": token},
        201,
    )


@auth_bp.post("/login")
def login_route():
    try:
        data = LoginInput.from_json(request.get_json(silent=True))
        user, token = auth_service.authenticate(data.email, data.password)
    except StockFlowError as exc:
        return from_error(exc)

    return success("Login successful", {"user": user.to_dict(), "token": token})


@auth_bp.get("/me")
@require_auth
def me_route():
    try:
        profile = auth_service.get_profile(g.context)
    except StockFlowError as exc:
        return from_error(exc)
    return success("User profile retrieved", profile)


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """Tokens are stateless; the client discards its copy."""
    return success("Logged out successfully")


@auth_bp.post("/forgot-password")
def forgot_password_route():
    try:
        data = ForgotPasswordInput.from_json(request.get_json(silent=True))
    except StockFlowError as exc:
        return from_error(exc)

    auth_service.request_password_reset(data.email)
    return success(auth_service.RESET_REQUESTED_MESSAGE)


@auth_bp.post("/reset-password")
def reset_password_route():
    try:
        data = ResetPasswordInput.from_json(request.get_json(silent=True))
        auth_service.reset_password(data.token, data.password)
    except StockFlowError as exc:
        return from_error(exc)

    return success("Password reset successful")
