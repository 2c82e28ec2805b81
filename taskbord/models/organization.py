"""Organization models.

- Organization: the business that owns bords and employs assignees.
- EmployeeMembership: join table linking employee users to organizations.
"""

import uuid

from taskbord.extensions import db


class Organization(db.Model):
    __tablename__ = "organizations"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name = db.Column(db.String(255), nullable=False)
    owner_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    owner = db.relationship("User", foreign_keys=[owner_id])
    members = db.relationship(
        "EmployeeMembership", back_populates="organization", lazy="dynamic"
    )
    bords = db.relationship(
        "Bord", back_populates="organization", lazy="dynamic"
    )

    def to_dict(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self):
        return f"<Organization {self.name}>"


class EmployeeMembership(db.Model):
    __tablename__ = "employee_memberships"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    organization_id = db.Column(
        db.String(36), db.ForeignKey("organizations.id"), nullable=False
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    __table_args__ = (
        db.UniqueConstraint(
            "organization_id", "user_id", name="uq_organization_employee"
        ),
    )

    # --- Relationships ---
    organization = db.relationship("Organization", back_populates="members")
    user = db.relationship("User", back_populates="employee_memberships")

    def __repr__(self):
        return f"<EmployeeMembership user={self.user_id} org={self.organization_id}>"
