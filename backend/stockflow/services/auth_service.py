# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service with Multi-Tenant Support

WHY: Every action must be attributable to a user inside a business. Uses
bcrypt for password hashing.

MULTI-TENANT: Registration creates the tenant (Business), its first admin
user, and its Settings row in one transaction. Email is globally unique so
login does not need a business identifier.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Login failures use one generic message (no user enumeration)
- Forgot-password always answers with the same message; the reset token is
  stored only as a SHA-256 hash with an expiry
"""

from __future__ import annotations

import logging
from datetime import timedelta

import bcrypt
from flask import current_app

from ..constants import (
    DEFAULT_BILL_PREFIX,
    DEFAULT_LOW_STOCK_THRESHOLD,
    MIN_PASSWORD_LENGTH,
    ROLE_ADMIN,
    ROLE_MANAGER,
)
from ..errors import AuthenticationError, DuplicateError, ValidationError
from ..extensions import db
from ..models import Business, Settings, User
from ..schemas import ManagerInput, RegisterInput
from . import session_service
from .session_service import RequestContext
from .tenant_service import get_owned_or_404, scoped_query
from stockflow.time_utils import utcnow

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
RESET_REQUESTED_MESSAGE = "If an account exists with this email, a password reset link has been sent"


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt (cost factor 12 unless BCRYPT_ROUNDS overrides).

    WHY: Cost factor 12 provides good security/performance balance. Tests
    lower it to keep the suite fast.
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt comparison; malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _ensure_email_available(email: str) -> None:
    if db.session.query(User.id).filter(User.email == email).first():
        raise DuplicateError("User already exists with this email")


def default_currency_symbol(currency: str) -> str:
    return "₹" if currency == "INR" else "$"


def register_business(data: RegisterInput) -> tuple[User, Business, str]:
    """
    Create business + admin user + default settings, then sign a token.

    All three rows commit together; a failure leaves nothing behind.
    """
    _ensure_email_available(data.email)
    password_hash = hash_password(data.password)

    try:
        business = Business(
            business_name=data.business_name,
            owner_name=data.owner_name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            gst_number=data.gst_number,
            currency=data.currency,
        )
        db.session.add(business)
        db.session.flush()

        user = User(
            business_id=business.id,
            full_name=data.owner_name,
            email=data.email,
            phone=data.phone,
            password_hash=password_hash,
            role=ROLE_ADMIN,
            is_active=True,
        )
        db.session.add(user)

        db.session.add(Settings(
            business_id=business.id,
            bill_prefix=DEFAULT_BILL_PREFIX,
            low_stock_threshold_default=DEFAULT_LOW_STOCK_THRESHOLD,
            currency_symbol=default_currency_symbol(data.currency),
        ))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Registered business id=%s admin=%s", business.id, user.email)
    return user, business, session_service.issue_token(user)


def authenticate(email: str, password: str) -> tuple[User, str]:
    """
    Verify credentials and issue a token.

    Raises AuthenticationError for unknown email, wrong password, or a
    deactivated account.
    """
    user = db.session.query(User).filter(User.email == email.strip().lower()).first()
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not user.is_active:
        raise AuthenticationError("Your account has been deactivated")

    user.last_login_at = utcnow()
    db.session.commit()
    return user, session_service.issue_token(user)


def get_profile(ctx: RequestContext) -> dict:
    user = get_owned_or_404(User, ctx.user_id, ctx.business_id, "User")
    business = db.session.get(Business, ctx.business_id)
    return {"user": user.to_dict(), "business": business.to_dict() if business else None}


def request_password_reset(email: str) -> str | None:
    """
    Store a hashed reset token for an active user.

    Returns the raw token (for delivery) or None when no active account
    matches. Callers must answer identically in both cases.
    """
    user = db.session.query(User).filter(User.email == email, User.is_active.is_(True)).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return None

    token = session_service.generate_reset_token()
    ttl = timedelta(minutes=current_app.config["PASSWORD_RESET_TTL_MINUTES"])
    user.reset_token_hash = session_service.hash_token(token)
    user.reset_token_expires_at = utcnow() + ttl
    db.session.commit()

    # No mail transport is configured; delivery is left to the operator.
    logger.info("Password reset token issued for user id=%s (expires %s)", user.id, user.reset_token_expires_at)
    return token


def reset_password(token: str, new_password: str) -> User:
    token_hash = session_service.hash_token(token)
    user = db.session.query(User).filter(User.reset_token_hash == token_hash).first()
    if user is None or user.reset_token_expires_at is None or user.reset_token_expires_at < utcnow():
        raise ValidationError("Invalid or expired reset token")

    user.password_hash = hash_password(new_password)
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    db.session.commit()
    logger.info("Password reset completed for user id=%s", user.id)
    return user


# ---------------------------------------------------------------------------
# user management (admin)
# ---------------------------------------------------------------------------

def list_users(ctx: RequestContext) -> list[User]:
    return scoped_query(User, ctx.business_id).order_by(User.created_at.asc(), User.id.asc()).all()


def add_manager(ctx: RequestContext, data: ManagerInput) -> User:
    _ensure_email_available(data.email)
    user = User(
        business_id=ctx.business_id,
        full_name=data.full_name,
        email=data.email,
        phone=data.phone,
        password_hash=hash_password(data.password),
        role=ROLE_MANAGER,
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    logger.info("Manager id=%s added to business id=%s", user.id, ctx.business_id)
    return user


def deactivate_user(ctx: RequestContext, user_id: int) -> User:
    if user_id == ctx.user_id:
        raise ValidationError("You cannot deactivate your own account")
    user = get_owned_or_404(User, user_id, ctx.business_id, "User")
    user.is_active = False
    db.session.commit()
    return user
