"""
Multi-Tenant Service: Business Scoping Helpers

WHY: Tenant isolation is enforced at the query-filter level only. Centralizing
the filter here means a single place to audit: every business-owned lookup
goes through scoped_query() or get_owned_or_404().

SECURITY INVARIANTS:
1. business_id always comes from the verified token (RequestContext), never
   from the request body or query string
2. Every query on a business-owned table filters by business_id
3. A record owned by another business is indistinguishable from a missing
   one (both raise NotFoundError)
"""

from __future__ import annotations

from ..extensions import db
from ..errors import NotFoundError


def scoped_query(model, business_id: int):
    """Query on a business-owned model, pre-filtered to the tenant."""
    if business_id is None:
        raise NotFoundError("Business context not established")
    return db.session.query(model).filter(model.business_id == business_id)


def get_owned_or_404(model, entity_id, business_id: int, label: str | None = None):
    """
    Fetch an entity by id within a business.

    Raises NotFoundError("<Label> not found") if it does not exist or belongs
    to a different business.
    """
    label = label or model.__name__
    if entity_id is None:
        raise NotFoundError(f"{label} not found")
    entity = scoped_query(model, business_id).filter(model.id == entity_id).first()
    if entity is None:
        raise NotFoundError(f"{label} not found")
    return entity


def get_owned_optional(model, entity_id, business_id: int, label: str | None = None):
    """Like get_owned_or_404, but a None id is allowed and returns None."""
    if entity_id is None:
        return None
    return get_owned_or_404(model, entity_id, business_id, label)
