"""Publish service — release a bord's pending drafts and unassignments.

publish_bord() turns the accumulated pending state of one bord into a
versioned PublishSnapshot:

 1. owner check
 2. take the per-bord publish lock (atomic version counter bump)
 3. idempotent replay by request key
 4. collect drafts (D) and pending unassignments (U)
 5. refuse an empty publish; ask for confirmation above the threshold
 6. promote D (new vs reassignment by lifecycle stage), hard-delete U
 7. write the snapshot, stamp the bord, reset the change tracker

Steps 3-5 read under the lock, so a publish that waited on another one
sees what that publish committed. Everything from step 2 on happens in the
caller's single DB transaction; raising rolls the counter bump back.
Notifications are only built here; the caller delivers them after commit,
best-effort, so a delivery failure can never undo a publish.

Functions flush but do NOT commit — the caller commits.
"""

import logging
from dataclasses import dataclass, field

from flask import current_app
from sqlalchemy import func, update

from taskbord.errors import PublishConfirmationRequired, ValidationError
from taskbord.extensions import db
from taskbord.models import audit
from taskbord.models.assignment import TaskAssignment
from taskbord.models.bord import Bord
from taskbord.models.publish import PublishSnapshot
from taskbord.services import bord_service, change_tracker, notification_service
from taskbord.utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    snapshot: PublishSnapshot
    notifications: list = field(default_factory=list)
    replayed: bool = False

    def to_dict(self):
        data = self.snapshot.to_summary()
        if self.replayed:
            data["replayed"] = True
        return data


def pending_drafts(bord_id):
    return (
        TaskAssignment.query
        .filter_by(bord_id=bord_id, context_type="organization", status="draft", is_deleted=False)
        .populate_existing()
        .order_by(TaskAssignment.created_at)
        .all()
    )


def pending_unassignments(bord_id):
    return (
        TaskAssignment.query
        .filter_by(
            bord_id=bord_id,
            context_type="organization",
            lifecycle_stage="pending_unassignment",
        )
        .populate_existing()
        .order_by(TaskAssignment.created_at)
        .all()
    )


def latest_version(bord_id):
    return (
        db.session.query(func.max(PublishSnapshot.version_number))
        .filter(PublishSnapshot.bord_id == bord_id)
        .scalar()
    ) or 0


def _lock_bord(bord):
    """Bump the bord's publish counter in SQL and reload the row locked.

    The UPDATE holds the bord row lock until commit or rollback, so a
    second publish for the same bord waits here before reading anything.
    """
    db.session.execute(
        update(Bord)
        .where(Bord.id == bord.id)
        .values(publish_version=Bord.publish_version + 1)
    )
    db.session.refresh(bord, with_for_update=True)


def _claim_next_version(bord):
    """Return the version for this publish; call with the bord locked."""
    version = max(bord.publish_version, latest_version(bord.id) + 1)
    bord.publish_version = version
    return version


def _task_notification(assignment, bord, kind):
    text = notification_service.preview(assignment.content)
    if kind == "new":
        type_, title = "task_assigned", "New Task Assigned"
        message = f'You\'ve been assigned a task in "{bord.title}": "{text}"'
    elif kind == "reassignment":
        type_, title = "task_reassigned", "Task Updated"
        message = f'A task in "{bord.title}" has been updated: "{text}"'
    else:
        type_, title = "task_unassigned", "Task Removed"
        message = f'A task in "{bord.title}" has been removed: "{text}"'
    return notification_service.build(
        assignment.assigned_to,
        type_,
        title,
        message,
        **notification_service.task_metadata(assignment, bord),
    )


def publish_bord(bord, actor_id, force=False, request_key=None):
    """Publish all pending changes on a bord.

    Args:
        bord: Bord to publish.
        actor_id: Requesting user; must own the bord.
        force: Required when more than PUBLISH_CONFIRM_THRESHOLD items are
            pending.
        request_key: Optional idempotency key. Replaying a key returns the
            snapshot it produced without publishing again.

    Returns:
        PublishResult.

    Raises:
        ForbiddenError: actor is not the bord owner.
        ValidationError: nothing to publish.
        PublishConfirmationRequired: too many items without force.
    """
    bord_service.require_owner(bord, actor_id)
    _lock_bord(bord)

    if request_key:
        previous = PublishSnapshot.query.filter_by(
            bord_id=bord.id, request_key=request_key
        ).first()
        if previous is not None:
            # Nothing is published, so hand the counter bump back
            bord.publish_version -= 1
            db.session.flush()
            logger.info(
                f"Publish replay for bord {bord.id} (key {request_key}) "
                f"-> v{previous.version_number}"
            )
            return PublishResult(snapshot=previous, replayed=True)

    drafts = pending_drafts(bord.id)
    unassigned = pending_unassignments(bord.id)
    total = len(drafts) + len(unassigned)

    if total == 0:
        raise ValidationError("No unpublished changes to publish")

    threshold = current_app.config.get("PUBLISH_CONFIRM_THRESHOLD", 30)
    if total > threshold and not force:
        raise PublishConfirmationRequired(total)

    version = _claim_next_version(bord)
    now = utcnow()
    notifications = []
    new_count = 0
    reassigned_count = 0

    for assignment in drafts:
        if assignment.lifecycle_stage == "never_published":
            new_count += 1
            notifications.append(_task_notification(assignment, bord, "new"))
        else:
            reassigned_count += 1
            notifications.append(_task_notification(assignment, bord, "reassignment"))
        assignment.status = "assigned"
        assignment.lifecycle_stage = "live"
        assignment.published_at = now

    for assignment in unassigned:
        notifications.append(_task_notification(assignment, bord, "unassignment"))
        db.session.delete(assignment)

    db.session.flush()

    snapshot = PublishSnapshot(
        bord_id=bord.id,
        version_number=version,
        published_by=actor_id,
        new_assignments=new_count,
        reassignments=reassigned_count,
        unassignments=len(unassigned),
        request_key=request_key or None,
        published_at=now,
    )
    db.session.add(snapshot)

    bord.last_published_at = now
    change_tracker.reset(bord.id, now=now)

    audit.record(
        "bord.published",
        actor_user_id=actor_id,
        bord_id=bord.id,
        version_number=version,
        new_assignments=new_count,
        reassignments=reassigned_count,
        unassignments=len(unassigned),
    )
    db.session.flush()

    logger.info(
        f"Published bord {bord.id} v{version}: {new_count} new, "
        f"{reassigned_count} reassigned, {len(unassigned)} unassigned"
    )
    return PublishResult(snapshot=snapshot, notifications=notifications)


def list_snapshots(bord):
    """Publish history for a bord, newest first."""
    return (
        PublishSnapshot.query
        .filter_by(bord_id=bord.id)
        .order_by(PublishSnapshot.version_number.desc())
        .all()
    )


def reconcile_bord(bord):
    """Re-derive the publish counter from the snapshot history.

    Repairs a counter left behind by a failed or out-of-band write.
    Returns a dict describing the bord's state after the repair.
    """
    latest = latest_version(bord.id)
    repaired = bord.publish_version != latest
    if repaired:
        logger.warning(
            f"Bord {bord.id} publish counter {bord.publish_version} != "
            f"latest snapshot v{latest}; resetting"
        )
        bord.publish_version = latest
        db.session.flush()

    return {
        "bordId": bord.id,
        "latestVersion": latest,
        "repaired": repaired,
        "pendingDrafts": len(pending_drafts(bord.id)),
        "pendingUnassignments": len(pending_unassignments(bord.id)),
    }
