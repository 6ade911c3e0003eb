# Overview: Service-layer operations for session tokens; issues and verifies signed JWTs.

"""
Stateless Session Tokens

WHY: Every request must carry its tenant context. The signed token holds
{userId, businessId, role}; the server re-derives business_id from the
verified claims on every request and never trusts a client-supplied one.

SECURITY FEATURES:
- HS256 signature (python-jose); secret from JWT_SECRET
- Expiry from JWT_EXPIRES_IN (default 7 days)
- The user row is re-loaded per request so deactivation takes effect
  immediately, and the token's businessId must still match the user's
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta, timezone

from flask import current_app
from jose import jwt, JWTError

from ..extensions import db
from ..models import User
from stockflow.time_utils import utcnow


@dataclass(frozen=True)
class RequestContext:
    """
    Verified identity for one request.

    Passed explicitly into every service call that touches tenant data.
    """
    user_id: int
    business_id: int
    role: str
    email: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def issue_token(user: User) -> str:
    """Sign a token for the user with the configured expiry."""
    now = utcnow().replace(tzinfo=timezone.utc)
    expires_in: timedelta = current_app.config["JWT_EXPIRES_IN"]
    claims = {
        "userId": user.id,
        "businessId": user.business_id,
        "role": user.role,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(
        claims,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_token(token: str) -> dict | None:
    """Return verified claims, or None for a bad signature or expired token."""
    try:
        return jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except JWTError:
        return None


def resolve_context(token: str) -> RequestContext | None:
    """
    Verify the token and load the user behind it.

    Returns None if the token is invalid, the user no longer exists, the user
    is deactivated, or the user's business no longer matches the claim.
    """
    claims = decode_token(token)
    if not claims:
        return None

    user_id = claims.get("userId")
    business_id = claims.get("businessId")
    if not isinstance(user_id, int) or not isinstance(business_id, int):
        return None

    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    if user.business_id != business_id:
        return None

    return RequestContext(
        user_id=user.id,
        business_id=user.business_id,
        role=user.role,
        email=user.email,
    )


def generate_reset_token() -> str:
    """64-char hex token (32 bytes of entropy) handed to the user once."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    SHA-256 for storage.

    WHY SHA-256 not bcrypt: reset tokens are already high-entropy.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
