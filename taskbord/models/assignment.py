"""TaskAssignment model — the delegation record.

One row delegates one board item (note, checklist entry, kanban card or
reminder) to one user. Organization rows go through the draft/publish
pipeline; personal rows are written straight into the published state.

status is the user-facing state machine:
    draft --(publish)--> assigned --(toggle)--> completed --(toggle)--> assigned

lifecycle_stage tracks the row's publish history, so publish never has to
re-derive "is this new?" or "is this a real unassignment?" from timestamps:
    never_published       created as a draft, never released
    live                  released to the assignee
    pending_reedit        released before, edited back into draft
    pending_unassignment  released before, then removed; next publish
                          notifies the assignee and hard-deletes the row
    discarded             removed before it was ever released

active_slot / kanban_slot are unique markers that are only populated while
the row is active (not deleted, not completed). They let the database
enforce "one active row per assignee per source item" and "one active
assignee per kanban card" even when two requests race past the read check.
"""

import uuid

from sqlalchemy import event

from taskbord.extensions import db
from taskbord.utils import isoformat


class TaskAssignment(db.Model):
    __tablename__ = "task_assignments"

    CONTEXT_TYPES = ["personal", "organization"]
    SOURCE_TYPES = ["note", "checklist_item", "kanban_task", "reminder_item"]
    PRIORITIES = ["low", "normal", "high"]
    STATUSES = ["draft", "assigned", "completed"]
    LIFECYCLE_STAGES = [
        "never_published",
        "live",
        "pending_reedit",
        "pending_unassignment",
        "discarded",
    ]
    PRIORITY_ORDER = {"high": 3, "normal": 2, "low": 1}

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    bord_id = db.Column(
        db.String(36), db.ForeignKey("bords.id"), nullable=True, index=True
    )  # null only for personal rows
    workspace_id = db.Column(
        db.String(36), db.ForeignKey("workspaces.id"), nullable=True, index=True
    )
    organization_id = db.Column(
        db.String(36), db.ForeignKey("organizations.id"), nullable=True, index=True
    )
    context_type = db.Column(
        db.String(20), nullable=False, default="organization"
    )  # personal | organization
    source_type = db.Column(db.String(30), nullable=False)
    source_id = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    assigned_to = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    assigned_by = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False
    )
    priority = db.Column(db.String(20), nullable=False, default="normal")
    due_date = db.Column(db.DateTime(timezone=True), nullable=True)
    execution_note = db.Column(db.Text, nullable=True)
    status = db.Column(
        db.String(20), nullable=False, default="draft", index=True
    )  # draft | assigned | completed
    lifecycle_stage = db.Column(
        db.String(30), nullable=False, default="never_published"
    )
    published_at = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False)

    # --- Kanban column context (owner-authoritative) ---
    column_id = db.Column(db.String(255), nullable=True)
    column_title = db.Column(db.String(255), nullable=True)
    available_columns = db.Column(db.JSON, default=list)

    # --- Employee proposals, reviewed by the owner ---
    employee_updates = db.Column(db.JSON, default=dict)

    # --- Uniqueness markers (see module docstring) ---
    active_slot = db.Column(db.String(700), nullable=True, unique=True)
    kanban_slot = db.Column(db.String(400), nullable=True, unique=True)

    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __table_args__ = (
        db.Index("ix_assignment_bord_status", "bord_id", "status"),
        db.Index("ix_assignment_assignee_status", "assigned_to", "status"),
        db.Index("ix_assignment_bord_source", "bord_id", "source_type", "source_id"),
        db.Index("ix_assignment_context_assignee", "context_type", "assigned_to", "status"),
    )

    # --- Relationships ---
    bord = db.relationship("Bord", back_populates="assignments")
    assignee = db.relationship("User", foreign_keys=[assigned_to])
    assigner = db.relationship("User", foreign_keys=[assigned_by])

    # --- State helpers ---

    @property
    def is_active(self):
        return not self.is_deleted and self.status != "completed"

    @property
    def was_released(self):
        """True once the assignee has seen this row at least once."""
        return self.lifecycle_stage in ("live", "pending_reedit")

    @property
    def scope(self):
        if self.context_type == "organization":
            return f"bord:{self.bord_id}"
        return f"personal:{self.assigned_by}"

    def refresh_slots(self):
        if not self.is_active:
            self.active_slot = None
            self.kanban_slot = None
            return
        self.active_slot = (
            f"{self.scope}|{self.source_type}|{self.source_id}|{self.assigned_to}"
        )
        if self.source_type == "kanban_task":
            self.kanban_slot = f"{self.scope}|{self.source_id}"
        else:
            self.kanban_slot = None

    def employee_updates_dict(self):
        updates = self.employee_updates or {}
        if not updates.get("updatedAt"):
            return None
        return {
            "content": updates.get("content"),
            "columnId": updates.get("columnId"),
            "columnTitle": updates.get("columnTitle"),
            "updatedAt": updates.get("updatedAt"),
        }

    def to_dict(self):
        data = {
            "id": self.id,
            "bordId": self.bord_id,
            "workspaceId": self.workspace_id,
            "contextType": self.context_type,
            "sourceType": self.source_type,
            "sourceId": self.source_id,
            "content": self.content,
            "assignedTo": self.assigned_to,
            "assignedBy": self.assigned_by,
            "priority": self.priority,
            "dueDate": isoformat(self.due_date),
            "executionNote": self.execution_note,
            "status": self.status,
            "lifecycleStage": self.lifecycle_stage,
            "publishedAt": isoformat(self.published_at),
            "completedAt": isoformat(self.completed_at),
            "isDeleted": self.is_deleted,
            "columnId": self.column_id,
            "columnTitle": self.column_title,
            "availableColumns": self.available_columns or [],
            "createdAt": isoformat(self.created_at),
        }
        updates = self.employee_updates_dict()
        if updates:
            data["employeeUpdates"] = updates
        return data

    def __repr__(self):
        return f"<TaskAssignment {self.source_type}:{self.source_id} -> {self.assigned_to} ({self.status})>"


@event.listens_for(TaskAssignment, "before_insert")
@event.listens_for(TaskAssignment, "before_update")
def _sync_slots(mapper, connection, target):
    target.refresh_slots()
