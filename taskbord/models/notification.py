"""Notification model — in-app inbox entries.

Written best-effort after the state change that triggered them has been
committed (see notification_service.deliver).
"""

import uuid

from taskbord.extensions import db
from taskbord.utils import isoformat


class Notification(db.Model):
    __tablename__ = "notifications"

    TYPES = [
        "task_assigned",
        "task_unassigned",
        "task_reassigned",
        "task_completed",
        "task_updated",
        "friend_request",
        "friend_accepted",
    ]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False
    )
    type = db.Column(db.String(50), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    metadata_ = db.Column(
        "metadata", db.JSON, default=dict
    )  # extra context, named metadata_ to avoid the declarative attribute clash
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    __table_args__ = (
        db.Index("ix_notification_user_read", "user_id", "is_read", "created_at"),
    )

    user = db.relationship("User", back_populates="notifications")

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "metadata": self.metadata_ or {},
            "isRead": self.is_read,
            "createdAt": isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<Notification {self.type} -> {self.user_id}>"
