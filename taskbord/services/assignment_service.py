"""Assignment service — organization-mode delegation records.

Owner side (all owner writes land as drafts and bump the change tracker):
- create_or_merge: create a draft, or refresh the assignee's existing
  active row for the same source item instead of duplicating it
- update_assignment: owner edit; a released row drops back to draft
- soft_delete: hide the row; publish later decides if it was a real
  unassignment from its lifecycle stage

Execution side (assignee only, no staging):
- toggle_completion, employee_update, list_execution_tasks

The kanban single-assignee rule is checked up front for a readable error
and enforced by the unique kanban_slot column for concurrent requests.

Functions flush but do NOT commit — the caller commits, then delivers the
returned notification payloads.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from taskbord.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from taskbord.extensions import db
from taskbord.models import audit
from taskbord.models.assignment import TaskAssignment
from taskbord.models.bord import Bord
from taskbord.models.organization import EmployeeMembership, Organization
from taskbord.models.user import User
from taskbord.services import bord_service, change_tracker, notification_service
from taskbord.utils import isoformat, parse_datetime, sanitize, utcnow

logger = logging.getLogger(__name__)

KANBAN_CONFLICT = (
    "Kanban tasks can only be assigned to one {who}. "
    "Remove the current assignee first."
)


# ─── Shared helpers (also used by personal_service) ──────────────

def validate_source(source_type, source_id, content, assigned_to=None, require_assignee=True):
    """Check the required fields for a new assignment.

    Returns the sanitized content.
    """
    content = sanitize(content)
    if not source_type or not source_id or not content or (require_assignee and not assigned_to):
        fields = "sourceType, sourceId, content, and assignedTo" if require_assignee \
            else "sourceType, sourceId, and content"
        raise ValidationError(f"{fields} are required")
    if source_type not in TaskAssignment.SOURCE_TYPES:
        raise ValidationError(
            f"Invalid sourceType '{source_type}'. "
            f"Must be one of: {', '.join(TaskAssignment.SOURCE_TYPES)}"
        )
    return content


def validate_priority(priority):
    priority = priority or "normal"
    if priority not in TaskAssignment.PRIORITIES:
        raise ValidationError(
            f"Invalid priority '{priority}'. "
            f"Must be one of: {', '.join(TaskAssignment.PRIORITIES)}"
        )
    return priority


def parse_due_date(value):
    try:
        return parse_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid dueDate '{value}'. Use an ISO-8601 timestamp.")


def require_user(user_id, label="Assignee"):
    user = db.session.get(User, user_id) if user_id else None
    if user is None:
        raise ValidationError(f"{label} user not found.")
    return user


def active_query(scope_filters, source_type, source_id):
    """Active (not deleted, not completed) rows for one source item."""
    return TaskAssignment.query.filter(
        *scope_filters,
        TaskAssignment.source_type == source_type,
        TaskAssignment.source_id == source_id,
        TaskAssignment.is_deleted.is_(False),
        TaskAssignment.status != "completed",
    )


def check_kanban_guard(scope_filters, source_type, source_id, assigned_to, who="employee"):
    """Refuse a second active assignee on a kanban card."""
    if source_type != "kanban_task":
        return
    holder = (
        active_query(scope_filters, source_type, source_id)
        .filter(TaskAssignment.assigned_to != assigned_to)
        .first()
    )
    if holder is not None:
        logger.warning(
            f"Kanban conflict on {source_id}: held by {holder.assigned_to}, "
            f"requested for {assigned_to}"
        )
        raise ConflictError(KANBAN_CONFLICT.format(who=who))


def flush_or_conflict(message):
    """Flush; a uniqueness violation means another request won the slot."""
    try:
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"Assignment slot conflict: {e.orig}")
        raise ConflictError(message)


def apply_column_context(assignment, column_id=None, column_title=None, available_columns=None):
    if column_id is not None:
        assignment.column_id = column_id or None
    if column_title is not None:
        assignment.column_title = sanitize(column_title) or None
    if available_columns is not None:
        if not isinstance(available_columns, list):
            raise ValidationError("availableColumns must be a list.")
        assignment.available_columns = [
            {"id": str(c.get("id")), "title": sanitize(c.get("title"))}
            for c in available_columns
            if isinstance(c, dict) and c.get("id")
        ]


def _org_scope(bord):
    return (
        TaskAssignment.bord_id == bord.id,
        TaskAssignment.context_type == "organization",
    )


def _get_bord_assignment(bord, assignment_id):
    assignment = TaskAssignment.query.filter_by(
        id=assignment_id,
        bord_id=bord.id,
        context_type="organization",
        is_deleted=False,
    ).first()
    if assignment is None:
        raise NotFoundError("Assignment")
    return assignment


# ─── Owner side ──────────────────────────────────────────────────

def create_or_merge(
    bord,
    actor_id,
    source_type,
    source_id,
    assigned_to,
    content,
    priority=None,
    due_date=None,
    execution_note=None,
    column_id=None,
    column_title=None,
    available_columns=None,
):
    """Create a draft assignment, or merge into the assignee's active one.

    Args:
        bord: Bord the source item lives on.
        actor_id: Requesting user; must own the bord.
        source_type: One of TaskAssignment.SOURCE_TYPES.
        source_id: Board item identifier (opaque).
        assigned_to: Assignee user id.
        content: Task description snapshot (sanitized).

    Returns:
        Tuple of (assignment, created). created is False on a merge.

    Raises:
        ForbiddenError: actor is not the bord owner.
        ValidationError: missing/invalid fields or unknown assignee.
        ConflictError: kanban card already held by someone else.
    """
    bord_service.require_owner(bord, actor_id)
    content = validate_source(source_type, source_id, content, assigned_to)
    priority = validate_priority(priority)
    due = parse_due_date(due_date)
    require_user(assigned_to)

    scope = _org_scope(bord)
    check_kanban_guard(scope, source_type, source_id, assigned_to)

    existing = (
        active_query(scope, source_type, source_id)
        .filter(TaskAssignment.assigned_to == assigned_to)
        .first()
    )

    if existing is not None:
        # Same assignee again: refresh in place rather than duplicate.
        existing.content = content
        existing.priority = priority
        existing.due_date = due
        existing.execution_note = sanitize(execution_note) or None
        apply_column_context(existing, column_id, column_title, available_columns)
        existing.status = "draft"
        if existing.was_released:
            existing.lifecycle_stage = "pending_reedit"
        flush_or_conflict(KANBAN_CONFLICT.format(who="employee"))

        change_tracker.record_change(bord.id)
        audit.record(
            "assignment.merged",
            actor_user_id=actor_id,
            bord_id=bord.id,
            assignment_id=existing.id,
            source_type=source_type,
            source_id=source_id,
        )
        db.session.flush()
        return existing, False

    assignment = TaskAssignment(
        bord_id=bord.id,
        organization_id=bord.organization_id,
        context_type="organization",
        source_type=source_type,
        source_id=source_id,
        content=content,
        assigned_to=assigned_to,
        assigned_by=actor_id,
        priority=priority,
        due_date=due,
        execution_note=sanitize(execution_note) or None,
        status="draft",
        lifecycle_stage="never_published",
        available_columns=[],
        employee_updates={},
    )
    apply_column_context(assignment, column_id, column_title, available_columns)
    db.session.add(assignment)
    flush_or_conflict(KANBAN_CONFLICT.format(who="employee"))

    change_tracker.record_change(bord.id)
    audit.record(
        "assignment.created",
        actor_user_id=actor_id,
        bord_id=bord.id,
        assignment_id=assignment.id,
        source_type=source_type,
        source_id=source_id,
        assigned_to=assigned_to,
    )
    db.session.flush()
    return assignment, True


def update_assignment(bord, assignment_id, actor_id, changes):
    """Owner edit of a draft or released assignment.

    Args:
        changes: dict with any of content, priority, due_date,
            execution_note, assigned_to.

    Returns:
        The updated TaskAssignment.

    Raises:
        ForbiddenError, NotFoundError, ValidationError, ConflictError.
    """
    bord_service.require_owner(bord, actor_id)
    assignment = _get_bord_assignment(bord, assignment_id)

    if "content" in changes:
        content = sanitize(changes["content"])
        if not content:
            raise ValidationError("Content cannot be empty.")
        assignment.content = content
    if "priority" in changes:
        assignment.priority = validate_priority(changes["priority"])
    if "due_date" in changes:
        assignment.due_date = parse_due_date(changes["due_date"])
    if "execution_note" in changes:
        assignment.execution_note = sanitize(changes["execution_note"]) or None
    if "assigned_to" in changes and changes["assigned_to"] != assignment.assigned_to:
        if assignment.was_released:
            raise ConflictError(
                "This task has already been published to its assignee. "
                "Remove the current assignee first."
            )
        require_user(changes["assigned_to"])
        assignment.assigned_to = changes["assigned_to"]

    # A released row needs another publish before the assignee sees the edit
    if assignment.status == "assigned":
        assignment.status = "draft"
        assignment.lifecycle_stage = "pending_reedit"

    flush_or_conflict("That user already has an active assignment for this item.")

    change_tracker.record_change(bord.id)
    audit.record(
        "assignment.updated",
        actor_user_id=actor_id,
        bord_id=bord.id,
        assignment_id=assignment.id,
        fields=sorted(changes.keys()),
    )
    db.session.flush()
    return assignment


def soft_delete(bord, assignment_id, actor_id):
    """Remove an assignment pending the next publish.

    A row the assignee has already seen becomes a pending unassignment;
    a never-released draft is simply discarded.
    """
    bord_service.require_owner(bord, actor_id)
    assignment = _get_bord_assignment(bord, assignment_id)

    assignment.is_deleted = True
    if assignment.was_released:
        assignment.lifecycle_stage = "pending_unassignment"
    else:
        assignment.lifecycle_stage = "discarded"
    db.session.flush()

    change_tracker.record_change(bord.id)
    audit.record(
        "assignment.deleted",
        actor_user_id=actor_id,
        bord_id=bord.id,
        assignment_id=assignment.id,
        lifecycle_stage=assignment.lifecycle_stage,
    )
    db.session.flush()
    return assignment


def purge_discarded(bord_id=None):
    """Hard-delete discarded rows; nobody was ever told about them.

    Covers personal rows too unless bord_id narrows it to one bord.
    Returns the number of rows removed.
    """
    query = TaskAssignment.query.filter_by(lifecycle_stage="discarded", is_deleted=True)
    if bord_id is not None:
        query = query.filter_by(bord_id=bord_id)
    purged = query.delete(synchronize_session=False)
    if purged:
        logger.info(f"Purged {purged} discarded assignment(s)")
    return purged


def list_for_bord(bord):
    """Visible (non-deleted) assignments on a bord, newest first."""
    assignments = (
        TaskAssignment.query
        .filter_by(bord_id=bord.id, context_type="organization", is_deleted=False)
        .order_by(TaskAssignment.created_at.desc())
        .all()
    )
    return assignments, change_tracker.summary(bord.id)


# ─── Execution side ──────────────────────────────────────────────

def _get_released_task(assignment_id):
    """An organization task the assignee can currently see."""
    assignment = db.session.get(TaskAssignment, assignment_id) if assignment_id else None
    if (
        assignment is None
        or assignment.context_type != "organization"
        or assignment.is_deleted
        or assignment.status == "draft"
    ):
        raise NotFoundError("Task")
    return assignment


def toggle_completion(assignment_id, actor_id):
    """Assignee flips completed <-> assigned.

    Returns:
        Tuple of (assignment, notifications).
    """
    assignment = _get_released_task(assignment_id)
    if assignment.assigned_to != actor_id:
        raise ForbiddenError()

    notifications = []
    if assignment.status == "completed":
        assignment.status = "assigned"
        assignment.completed_at = None
        flush_or_conflict(KANBAN_CONFLICT.format(who="employee"))
        action = "assignment.reopened"
    else:
        assignment.status = "completed"
        assignment.completed_at = utcnow()
        db.session.flush()
        action = "assignment.completed"

        bord = db.session.get(Bord, assignment.bord_id)
        if bord is not None and bord.owner_id != actor_id:
            notifications.append(notification_service.build(
                bord.owner_id,
                "task_completed",
                "Task Completed",
                f'A task has been completed in "{bord.title}": '
                f'"{notification_service.preview(assignment.content)}"',
                **notification_service.task_metadata(assignment, bord),
            ))

    audit.record(
        action,
        actor_user_id=actor_id,
        bord_id=assignment.bord_id,
        assignment_id=assignment.id,
    )
    db.session.flush()
    return assignment, notifications


def employee_update(assignment_id, actor_id, column_id=None, column_title=None, content=None):
    """Assignee proposes a column move and/or content change.

    Proposals are stored in employee_updates for the owner to review; the
    owner-authoritative content/column fields are left untouched.

    Returns:
        Tuple of (assignment, view, notifications). view is the merged
        display dict for the response.
    """
    if not column_id and not content:
        raise ValidationError("At least one of columnId or content is required")

    assignment = _get_released_task(assignment_id)
    if assignment.assigned_to != actor_id:
        raise ForbiddenError()
    if assignment.status == "completed":
        raise ValidationError("Cannot update a completed task")

    updates = dict(assignment.employee_updates or {})
    now = isoformat(utcnow())
    changes = []

    if column_id and assignment.source_type == "kanban_task":
        old_column = updates.get("columnTitle") or assignment.column_title or "unknown"
        new_title = sanitize(column_title) or column_id
        updates.update({"columnId": column_id, "columnTitle": new_title, "updatedAt": now})
        changes.append(f'Task moved from "{old_column}" to "{new_title}"')

    content = sanitize(content)
    if content and content != assignment.content:
        updates.update({"content": content, "updatedAt": now})
        changes.append("content updated" if changes else "Task content updated")

    notifications = []
    if changes:
        assignment.employee_updates = updates
        db.session.flush()
        audit.record(
            "assignment.employee_updated",
            actor_user_id=actor_id,
            bord_id=assignment.bord_id,
            assignment_id=assignment.id,
            column_id=updates.get("columnId"),
            content_changed=bool(content and content != assignment.content),
        )
        db.session.flush()

        bord = db.session.get(Bord, assignment.bord_id)
        if bord is not None and bord.owner_id != actor_id:
            notifications.append(notification_service.build(
                bord.owner_id,
                "task_updated",
                "Task Updated",
                f'{" and ".join(changes)} in "{bord.title}": '
                f'"{notification_service.preview(assignment.content, 60)}"',
                **notification_service.task_metadata(assignment, bord),
            ))

    view = {
        "id": assignment.id,
        "columnId": updates.get("columnId") or assignment.column_id,
        "columnTitle": updates.get("columnTitle") or assignment.column_title,
        "content": updates.get("content") or assignment.content,
        "employeeUpdates": {
            "content": updates.get("content"),
            "columnId": updates.get("columnId"),
            "columnTitle": updates.get("columnTitle"),
            "updatedAt": updates.get("updatedAt"),
        },
    }
    return assignment, view, notifications


def list_execution_tasks(user_id):
    """Released organization tasks for an employee, grouped by organization.

    Returns:
        Tuple of (groups, organizations). Each group is
        {"organization": {...}, "tasks": [...]}; tasks are ordered open
        first, then priority desc, due date asc (undated last), created asc.
    """
    org_ids = [
        m.organization_id
        for m in EmployeeMembership.query.filter_by(user_id=user_id).all()
    ]
    organizations = {}
    if org_ids:
        for org in Organization.query.filter(Organization.id.in_(org_ids)).all():
            organizations[org.id] = org.to_dict()

    rows = (
        db.session.query(TaskAssignment, Bord)
        .join(Bord, TaskAssignment.bord_id == Bord.id)
        .filter(
            TaskAssignment.assigned_to == user_id,
            TaskAssignment.context_type == "organization",
            TaskAssignment.status.in_(["assigned", "completed"]),
            TaskAssignment.is_deleted.is_(False),
        )
        .all()
    )

    groups = {}
    for assignment, bord in rows:
        org = organizations.get(bord.organization_id)
        if org is None:
            continue
        task = assignment.to_dict()
        task["bordTitle"] = bord.title
        task["priorityOrder"] = TaskAssignment.PRIORITY_ORDER.get(assignment.priority, 2)
        groups.setdefault(org["id"], {"organization": org, "tasks": []})
        groups[org["id"]]["tasks"].append((assignment, task))

    result = []
    for group in groups.values():
        ordered = sorted(group["tasks"], key=lambda pair: _execution_sort_key(pair[0]))
        result.append({
            "organization": group["organization"],
            "tasks": [task for _, task in ordered],
        })
    return result, list(organizations.values())


def _naive(value):
    # SQLite hands back naive datetimes, Postgres aware ones
    return value.replace(tzinfo=None) if value else datetime.min


def _execution_sort_key(assignment):
    return (
        assignment.status == "completed",
        -TaskAssignment.PRIORITY_ORDER.get(assignment.priority, 2),
        assignment.due_date is None,
        _naive(assignment.due_date),
        _naive(assignment.created_at),
    )
