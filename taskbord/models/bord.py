"""Bord model.

A Bord is the server-side reference that binds a client-side board document
to an organization and its owner. Board content itself lives in the
external board-document store; only the delegation metadata is kept here.
"""

import uuid

from taskbord.extensions import db
from taskbord.utils import isoformat


class Bord(db.Model):
    __tablename__ = "bords"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    organization_id = db.Column(
        db.String(36), db.ForeignKey("organizations.id"), nullable=False, index=True
    )
    local_board_id = db.Column(db.String(255), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    owner_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    last_published_at = db.Column(db.DateTime(timezone=True), nullable=True)
    # Bumped atomically by every publish; serializes publishes per bord.
    publish_version = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "organization_id", "local_board_id", name="uq_bord_org_local_board"
        ),
    )

    # --- Relationships ---
    organization = db.relationship("Organization", back_populates="bords")
    owner = db.relationship("User", back_populates="owned_bords")
    assignments = db.relationship(
        "TaskAssignment", back_populates="bord", lazy="dynamic"
    )
    snapshots = db.relationship(
        "PublishSnapshot",
        back_populates="bord",
        lazy="dynamic",
        order_by="PublishSnapshot.version_number.desc()",
    )
    change_tracker = db.relationship(
        "ChangeTracker", back_populates="bord", uselist=False
    )

    def to_dict(self, role="owner"):
        return {
            "id": self.id,
            "organizationId": self.organization_id,
            "localBoardId": self.local_board_id,
            "title": self.title,
            "ownerId": self.owner_id,
            "lastPublishedAt": isoformat(self.last_published_at),
            "role": role,
        }

    def __repr__(self):
        return f"<Bord {self.title}>"
