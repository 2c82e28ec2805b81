"""Owner-sync service — mirror the owner's own board edits onto assignments.

When the bord owner ticks a checklist item or drags a kanban card on their
board, the matching TaskAssignment rows follow. This is not a delegation
change, so nothing is staged and the change tracker is left alone.
"""

import logging

from taskbord.errors import ValidationError
from taskbord.extensions import db
from taskbord.models import audit
from taskbord.models.assignment import TaskAssignment
from taskbord.services import assignment_service, bord_service
from taskbord.utils import sanitize, utcnow

logger = logging.getLogger(__name__)

ACTIONS = ["toggle_complete", "move_column"]


def sync_source_item(
    bord,
    actor_id,
    source_type,
    source_id,
    action,
    completed=None,
    column_id=None,
    column_title=None,
):
    """Apply an owner-side board edit to every live row for a source item.

    toggle_complete only touches rows the assignee can see (assigned or
    completed); drafts stay drafts. move_column updates every non-deleted row.

    Returns:
        Number of rows updated.
    """
    bord_service.require_owner(bord, actor_id)
    if not source_type or not source_id or not action:
        raise ValidationError("sourceType, sourceId, and action are required")
    if action not in ACTIONS:
        raise ValidationError(
            f"Invalid action '{action}'. Must be one of: {', '.join(ACTIONS)}"
        )
    if action == "move_column" and not column_id:
        raise ValidationError("columnId is required for move_column")

    rows = TaskAssignment.query.filter_by(
        bord_id=bord.id,
        context_type="organization",
        source_type=source_type,
        source_id=source_id,
        is_deleted=False,
    ).all()

    now = utcnow()
    updated = 0
    for assignment in rows:
        if action == "toggle_complete":
            if assignment.status not in ("assigned", "completed"):
                continue
            if completed:
                assignment.status = "completed"
                assignment.completed_at = assignment.completed_at or now
            else:
                assignment.status = "assigned"
                assignment.completed_at = None
        else:
            assignment.column_id = column_id
            assignment.column_title = sanitize(column_title) or None
        updated += 1

    if updated:
        # Reopening can collide with another active holder of a kanban card
        assignment_service.flush_or_conflict(
            assignment_service.KANBAN_CONFLICT.format(who="employee")
        )
        audit.record(
            "assignment.owner_synced",
            actor_user_id=actor_id,
            bord_id=bord.id,
            source_type=source_type,
            source_id=source_id,
            action=action,
            updated=updated,
        )
        db.session.flush()
        logger.info(f"Owner sync on bord {bord.id} ({action} {source_id}): {updated} rows")
    return updated
