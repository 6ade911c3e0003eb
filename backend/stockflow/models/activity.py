from __future__ import annotations

from ..extensions import db
from stockflow.time_utils import to_utc_z


class ActivityLog(db.Model):
    """Append-only feed of business actions shown on the dashboard."""
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_business_created", "business_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    action = db.Column(db.String(32), nullable=False)
    entity_type = db.Column(db.String(32), nullable=False)
    entity_id = db.Column(db.Integer, nullable=True)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
            "user": {"id": self.user.id, "full_name": self.user.full_name} if self.user else None,
        }
