"""Workspace models.

- Workspace: per-user container. Every user has at most one "personal"
  workspace (self reminders + friend assignments) and one
  "organization_container".
- Friend: a contact in a personal workspace who can receive personal
  assignments once the link is accepted.
"""

import uuid

from taskbord.extensions import db


class Workspace(db.Model):
    __tablename__ = "workspaces"

    TYPES = ["personal", "organization_container"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    owner_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    type = db.Column(db.String(50), nullable=False)  # personal | organization_container
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    __table_args__ = (
        db.UniqueConstraint("owner_id", "type", name="uq_workspace_owner_type"),
    )

    # --- Relationships ---
    owner = db.relationship("User", foreign_keys=[owner_id])
    friends = db.relationship(
        "Friend", back_populates="workspace", lazy="dynamic"
    )

    def __repr__(self):
        return f"<Workspace {self.name} ({self.type})>"


class Friend(db.Model):
    __tablename__ = "friends"

    STATUSES = ["pending", "accepted"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    workspace_id = db.Column(
        db.String(36), db.ForeignKey("workspaces.id"), nullable=False
    )
    owner_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    friend_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    email = db.Column(db.String(255), nullable=False)  # denormalized for display
    nickname = db.Column(db.String(255), nullable=True)
    status = db.Column(
        db.String(20), default="pending", nullable=False
    )  # pending | accepted
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    __table_args__ = (
        db.UniqueConstraint(
            "workspace_id", "friend_user_id", name="uq_workspace_friend"
        ),
    )

    # --- Relationships ---
    workspace = db.relationship("Workspace", back_populates="friends")
    friend_user = db.relationship("User", foreign_keys=[friend_user_id])

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.friend_user_id,
            "email": self.email,
            "nickname": self.nickname,
            "fullName": self.friend_user.full_name if self.friend_user else None,
            "status": self.status,
        }

    def __repr__(self):
        return f"<Friend owner={self.owner_id} friend={self.friend_user_id} ({self.status})>"
