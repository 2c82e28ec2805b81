"""Audit event model.

Logs every delegation state change (assignment created/edited/removed,
completion toggles, publishes, friend links) for the activity feed and
for re-deriving publish history when snapshots and assignments disagree.
"""

import uuid

from taskbord.extensions import db


class AuditEvent(db.Model):
    __tablename__ = "audit_events"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    bord_id = db.Column(
        db.String(36), db.ForeignKey("bords.id"), nullable=True, index=True
    )
    actor_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    action = db.Column(db.String(255), nullable=False)  # e.g. "bord.published"
    metadata_ = db.Column(
        "metadata", db.JSON, default=dict
    )  # extra context, named metadata_ to avoid Python builtin clash
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    # --- Relationships ---
    actor = db.relationship("User", back_populates="audit_events")

    def __repr__(self):
        return f"<AuditEvent {self.action}>"


def record(action, actor_user_id=None, bord_id=None, **metadata):
    """Add an audit row to the session (caller flushes/commits)."""
    event = AuditEvent(
        bord_id=bord_id,
        actor_user_id=actor_user_id,
        action=action,
        metadata_=metadata,
    )
    db.session.add(event)
    return event
