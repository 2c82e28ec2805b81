"""Personal service — unstaged delegation between individuals.

Personal assignments go to yourself or an accepted friend and land in the
published state immediately: no draft, no change tracker, no snapshot.
Collaboration is symmetric, so either party may move or complete a task;
editing content and deleting stay with the assigner.

Functions flush but do NOT commit — the caller commits, then delivers the
returned notification payloads.
"""

from taskbord.errors import ForbiddenError, NotFoundError, ValidationError
from taskbord.extensions import db
from taskbord.models import audit
from taskbord.models.assignment import TaskAssignment
from taskbord.services import assignment_service, friend_service, notification_service
from taskbord.utils import sanitize, utcnow

FILTERS = ["all", "received", "sent"]


def _personal_scope(actor_id):
    return (
        TaskAssignment.context_type == "personal",
        TaskAssignment.assigned_by == actor_id,
    )


def _get_personal(assignment_id):
    assignment = TaskAssignment.query.filter_by(
        id=assignment_id, context_type="personal", is_deleted=False
    ).first()
    if assignment is None:
        raise NotFoundError("Assignment")
    return assignment


def _require_party(assignment, actor_id):
    if actor_id not in (assignment.assigned_to, assignment.assigned_by):
        raise ForbiddenError()


def _require_assigner(assignment, actor_id):
    if assignment.assigned_by != actor_id:
        raise ForbiddenError()


def create_personal_assignment(
    actor_id,
    source_type,
    source_id,
    content,
    assigned_to=None,
    due_date=None,
    execution_note=None,
    column_id=None,
    column_title=None,
    available_columns=None,
):
    """Assign a board item to yourself or an accepted friend.

    Re-sending the same item to the same person refreshes their existing
    active assignment instead of creating a second one.

    Returns:
        Tuple of (assignment, created, notifications).

    Raises:
        NotFoundError: actor has no personal workspace.
        ValidationError: missing fields or recipient is not an accepted friend.
        ConflictError: kanban card already held by someone else.
    """
    content = assignment_service.validate_source(
        source_type, source_id, content, require_assignee=False
    )
    due = assignment_service.parse_due_date(due_date)

    workspace = friend_service.get_personal_workspace(actor_id)
    if workspace is None:
        raise NotFoundError("Personal workspace")

    recipient = assigned_to or actor_id
    is_self = recipient == actor_id
    if not is_self and not friend_service.is_accepted_friend(actor_id, recipient):
        raise ValidationError(
            "You can only assign personal tasks to yourself or your accepted friends"
        )

    scope = _personal_scope(actor_id)
    assignment_service.check_kanban_guard(
        scope, source_type, source_id, recipient, who="person"
    )

    now = utcnow()
    assignment = (
        assignment_service.active_query(scope, source_type, source_id)
        .filter(TaskAssignment.assigned_to == recipient)
        .first()
    )
    created = assignment is None
    if created:
        assignment = TaskAssignment(
            bord_id=None,
            workspace_id=workspace.id,
            context_type="personal",
            source_type=source_type,
            source_id=source_id,
            assigned_to=recipient,
            assigned_by=actor_id,
            available_columns=[],
            employee_updates={},
        )
        db.session.add(assignment)

    assignment.content = content
    assignment.priority = "normal"
    assignment.due_date = due
    assignment.execution_note = sanitize(execution_note) or None
    assignment_service.apply_column_context(
        assignment, column_id, column_title, available_columns
    )
    assignment.status = "assigned"
    assignment.lifecycle_stage = "live"
    assignment.published_at = now

    assignment_service.flush_or_conflict(
        assignment_service.KANBAN_CONFLICT.format(who="person")
    )

    audit.record(
        "assignment.created" if created else "assignment.merged",
        actor_user_id=actor_id,
        assignment_id=assignment.id,
        context_type="personal",
        source_type=source_type,
        source_id=source_id,
        assigned_to=recipient,
    )
    db.session.flush()

    notifications = []
    if not is_self:
        sender = notification_service.actor_name(actor_id)
        notifications.append(notification_service.build(
            recipient,
            "task_assigned",
            "New Personal Reminder",
            f'{sender} sent you a reminder: "{notification_service.preview(content, 60)}"',
            **notification_service.task_metadata(assignment),
        ))
    return assignment, created, notifications


def list_personal_assignments(user_id, filter_="all"):
    """Personal assignments received, sent, or both."""
    if filter_ not in FILTERS:
        raise ValidationError(
            f"Invalid filter '{filter_}'. Must be one of: {', '.join(FILTERS)}"
        )
    query = TaskAssignment.query.filter_by(context_type="personal", is_deleted=False)
    if filter_ == "received":
        query = query.filter(TaskAssignment.assigned_to == user_id)
    elif filter_ == "sent":
        query = query.filter(TaskAssignment.assigned_by == user_id)
    else:
        query = query.filter(db.or_(
            TaskAssignment.assigned_to == user_id,
            TaskAssignment.assigned_by == user_id,
        ))
    return query.order_by(TaskAssignment.created_at.desc()).all()


def update_personal_assignment(assignment_id, actor_id, changes):
    """Assigner edits content, due date or note. Immediate, no staging.

    Args:
        changes: dict with any of content, due_date, execution_note.
    """
    assignment = _get_personal(assignment_id)
    _require_assigner(assignment, actor_id)

    if "content" in changes:
        content = sanitize(changes["content"])
        if not content:
            raise ValidationError("Content cannot be empty.")
        assignment.content = content
    if "due_date" in changes:
        assignment.due_date = assignment_service.parse_due_date(changes["due_date"])
    if "execution_note" in changes:
        assignment.execution_note = sanitize(changes["execution_note"]) or None
    db.session.flush()

    audit.record(
        "assignment.updated",
        actor_user_id=actor_id,
        assignment_id=assignment.id,
        context_type="personal",
        fields=sorted(changes.keys()),
    )
    db.session.flush()
    return assignment


def delete_personal_assignment(assignment_id, actor_id):
    """Assigner removes a personal assignment (soft delete)."""
    assignment = _get_personal(assignment_id)
    _require_assigner(assignment, actor_id)

    assignment.is_deleted = True
    assignment.lifecycle_stage = "discarded"
    db.session.flush()

    audit.record(
        "assignment.deleted",
        actor_user_id=actor_id,
        assignment_id=assignment.id,
        context_type="personal",
    )
    db.session.flush()
    return assignment


def toggle_personal_completion(assignment_id, actor_id):
    """Either party flips completed <-> assigned.

    Returns:
        Tuple of (assignment, notifications). Completing notifies the
        other party (never the actor).
    """
    assignment = _get_personal(assignment_id)
    _require_party(assignment, actor_id)

    notifications = []
    if assignment.status == "completed":
        assignment.status = "assigned"
        assignment.completed_at = None
        assignment_service.flush_or_conflict(
            assignment_service.KANBAN_CONFLICT.format(who="person")
        )
        action = "assignment.reopened"
    else:
        assignment.status = "completed"
        assignment.completed_at = utcnow()
        db.session.flush()
        action = "assignment.completed"

        target = notification_service.counterpart_of(assignment, actor_id)
        if target:
            name = notification_service.actor_name(actor_id)
            notifications.append(notification_service.build(
                target,
                "task_completed",
                "Reminder Completed",
                f'{name} completed: "{notification_service.preview(assignment.content, 60)}"',
                **notification_service.task_metadata(assignment),
            ))

    audit.record(
        action,
        actor_user_id=actor_id,
        assignment_id=assignment.id,
        context_type="personal",
    )
    db.session.flush()
    return assignment, notifications


def move_personal_assignment(assignment_id, actor_id, column_id=None, column_title=None, content=None):
    """Either party moves a kanban task; only the assigner may change content.

    Returns:
        Tuple of (assignment, notifications).
    """
    if not column_id and not content:
        raise ValidationError("At least one of columnId or content is required")

    assignment = _get_personal(assignment_id)
    _require_party(assignment, actor_id)
    if assignment.status == "completed":
        raise ValidationError("Cannot update a completed task")

    content = sanitize(content)
    content_changed = bool(content) and content != assignment.content
    if content_changed and assignment.assigned_by != actor_id:
        raise ForbiddenError("Only the assigner can edit the task content")

    changes = []
    if column_id and assignment.source_type == "kanban_task":
        old_column = assignment.column_title or "unknown"
        assignment.column_id = column_id
        assignment.column_title = sanitize(column_title) or column_id
        changes.append(f'Task moved from "{old_column}" to "{assignment.column_title}"')

    if content_changed:
        assignment.content = content
        changes.append("content updated" if changes else "Task content updated")

    db.session.flush()

    notifications = []
    if changes:
        audit.record(
            "assignment.updated",
            actor_user_id=actor_id,
            assignment_id=assignment.id,
            context_type="personal",
            column_id=assignment.column_id,
            content_changed=content_changed,
        )
        db.session.flush()

        target = notification_service.counterpart_of(assignment, actor_id)
        if target:
            name = notification_service.actor_name(actor_id)
            notifications.append(notification_service.build(
                target,
                "task_updated",
                "Task Updated",
                f'{name}: {" and ".join(changes)}: '
                f'"{notification_service.preview(assignment.content, 60)}"',
                **notification_service.task_metadata(assignment),
            ))
    return assignment, notifications
