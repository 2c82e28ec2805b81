"""Publish pipeline models.

- ChangeTracker: per-bord running count of unpublished owner mutations.
  Advisory only (UI badge); publish resets it, nothing derives from it.
- PublishSnapshot: append-only record of one publish's aggregate effect.
"""

import uuid

from taskbord.extensions import db
from taskbord.utils import isoformat


class ChangeTracker(db.Model):
    __tablename__ = "change_trackers"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    bord_id = db.Column(
        db.String(36), db.ForeignKey("bords.id"), unique=True, nullable=False
    )
    change_count = db.Column(db.Integer, nullable=False, default=0)
    last_modified_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    bord = db.relationship("Bord", back_populates="change_tracker")

    def to_dict(self):
        return {
            "changeCount": self.change_count,
            "lastModifiedAt": isoformat(self.last_modified_at),
        }

    def __repr__(self):
        return f"<ChangeTracker bord={self.bord_id} count={self.change_count}>"


class PublishSnapshot(db.Model):
    __tablename__ = "publish_snapshots"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    bord_id = db.Column(
        db.String(36), db.ForeignKey("bords.id"), nullable=False, index=True
    )
    version_number = db.Column(db.Integer, nullable=False)
    published_by = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False
    )
    new_assignments = db.Column(db.Integer, nullable=False, default=0)
    reassignments = db.Column(db.Integer, nullable=False, default=0)
    unassignments = db.Column(db.Integer, nullable=False, default=0)
    # Client-supplied idempotency key; a retried publish with the same key
    # returns this snapshot instead of publishing again.
    request_key = db.Column(db.String(255), nullable=True)
    published_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    __table_args__ = (
        db.UniqueConstraint(
            "bord_id", "version_number", name="uq_snapshot_bord_version"
        ),
        db.UniqueConstraint(
            "bord_id", "request_key", name="uq_snapshot_bord_request_key"
        ),
    )

    bord = db.relationship("Bord", back_populates="snapshots")
    publisher = db.relationship("User", foreign_keys=[published_by])

    @property
    def total_deployed(self):
        return self.new_assignments + self.reassignments

    def to_summary(self):
        return {
            "snapshotId": self.id,
            "versionNumber": self.version_number,
            "newAssignments": self.new_assignments,
            "reassignments": self.reassignments,
            "unassignments": self.unassignments,
            "totalDeployed": self.total_deployed,
        }

    def to_dict(self):
        data = self.to_summary()
        data.update({
            "bordId": self.bord_id,
            "publishedBy": self.published_by,
            "publishedAt": isoformat(self.published_at),
        })
        return data

    def __repr__(self):
        return f"<PublishSnapshot bord={self.bord_id} v{self.version_number}>"
