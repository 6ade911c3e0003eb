# Overview: Request and role decorators for API routes.

from functools import wraps

from flask import g, request

from .responses import failure
from .services import session_service


def _is_authenticated() -> bool:
    return getattr(g, "context", None) is not None


def require_auth(f):
    """
    Require a valid bearer token and establish tenant context.

    MULTI-TENANT: Sets g.context (RequestContext with user_id, business_id,
    role, email). business_id comes only from the verified token.

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid or expired token
    - User missing or deactivated
    - Token business no longer matches the user's business
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return failure("Not authorized, no token provided", 401)

        token = auth_header.split(" ", 1)[1].strip()
        context = session_service.resolve_context(token)

        if context is None:
            return failure("Not authorized, token invalid or expired", 401)

        g.context = context
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """Allow the request only if the authenticated user's role is in `roles`."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth ran first
            if not _is_authenticated():
                return failure("Not authorized, no token provided", 401)

            if g.context.role not in roles:
                return failure(
                    f"User role '{g.context.role}' is not authorized to access this route",
                    403,
                )

            return f(*args, **kwargs)

        return decorated_function

    return decorator
