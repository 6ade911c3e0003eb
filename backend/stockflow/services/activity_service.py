# Overview: Service-layer operations for the activity feed.

"""
Activity log (append-only).

- Entries are written inside the same write unit as the action they record.
- No updates or deletes of existing entries.
"""

from __future__ import annotations

from ..extensions import db
from ..models import ActivityLog
from .tenant_service import scoped_query


def record_activity(
    *,
    business_id: int,
    user_id: int | None,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    description: str | None = None,
) -> ActivityLog:
    entry = ActivityLog(
        business_id=business_id,
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        description=description,
    )
    db.session.add(entry)
    db.session.flush()
    return entry


def recent_activities(business_id: int, limit: int = 10) -> list[ActivityLog]:
    return (
        scoped_query(ActivityLog, business_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
