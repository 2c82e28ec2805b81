"""Notification service — the in-app notification sink.

Services never write Notification rows themselves. They return plain
payload dicts ({user_id, type, title, message, metadata}) and the caller
hands them to deliver() after committing the state change. Delivery is
best-effort: a failure is logged and swallowed, it never undoes the
delegation change that triggered it.
"""

import logging

from flask import current_app

from taskbord.extensions import db
from taskbord.models.notification import Notification
from taskbord.models.user import User
from taskbord.utils import truncate

logger = logging.getLogger(__name__)


def build(user_id, type_, title, message, **metadata):
    """Create a notification payload (not persisted)."""
    return {
        "user_id": user_id,
        "type": type_,
        "title": title,
        "message": message,
        "metadata": {k: v for k, v in metadata.items() if v is not None},
    }


def preview(text, length=None):
    """Shorten task content for notification text."""
    if length is None:
        length = current_app.config.get("NOTIFICATION_PREVIEW_LENGTH", 80)
    return truncate(text, length)


def actor_name(user_id):
    """Display name for notification text, via the user directory."""
    user = db.session.get(User, user_id) if user_id else None
    return user.display_name if user else "Someone"


def counterpart_of(assignment, actor_id):
    """Resolve who should hear about an action on this assignment.

    The assignee acting informs the assigner and vice versa. Returns None
    when the counterpart is the actor (self-assigned reminders).
    """
    if actor_id == assignment.assigned_to:
        target = assignment.assigned_by
    elif actor_id == assignment.assigned_by:
        target = assignment.assigned_to
    else:
        return None
    return None if target == actor_id else target


def task_metadata(assignment, bord=None):
    return {
        "bordId": bord.id if bord else None,
        "bordTitle": bord.title if bord else None,
        "organizationId": bord.organization_id if bord else None,
        "taskAssignmentId": assignment.id,
        "sourceType": assignment.source_type,
        "sourceId": assignment.source_id,
    }


def deliver(notifications):
    """Persist notification payloads. Never raises.

    Returns the number delivered (0 on failure).
    """
    if not notifications:
        return 0
    try:
        for payload in notifications:
            db.session.add(Notification(
                user_id=payload["user_id"],
                type=payload["type"],
                title=payload["title"],
                message=payload["message"],
                metadata_=payload.get("metadata") or {},
            ))
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to deliver {len(notifications)} notification(s): {e}")
        return 0
    logger.info(f"Delivered {len(notifications)} notification(s)")
    return len(notifications)


def list_notifications(user_id):
    """Latest notifications for a user plus the unread count."""
    limit = current_app.config.get("NOTIFICATION_LIST_LIMIT", 50)
    notifications = (
        Notification.query
        .filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )
    unread = Notification.query.filter_by(user_id=user_id, is_read=False).count()
    return notifications, unread


def mark_read(user_id, notification_ids=None, mark_all=False):
    """Mark notifications as read. Only touches the user's own rows."""
    query = Notification.query.filter_by(user_id=user_id, is_read=False)
    if not mark_all:
        if not notification_ids:
            return 0
        query = query.filter(Notification.id.in_(notification_ids))
    count = query.update({Notification.is_read: True}, synchronize_session=False)
    db.session.flush()
    return count
