"""Notifications blueprint — /api/notifications"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from taskbord.extensions import db
from taskbord.services import notification_service

notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.route("", methods=["GET"])
@login_required
def list_notifications():
    notifications, unread = notification_service.list_notifications(current_user.id)
    return jsonify({
        "notifications": [n.to_dict() for n in notifications],
        "unreadCount": unread,
    })


@notifications_bp.route("", methods=["PUT"])
@login_required
def mark_read():
    """Body: {"notificationIds": [...]} or {"markAll": true}."""
    data = request.get_json(silent=True) or {}
    updated = notification_service.mark_read(
        current_user.id,
        notification_ids=data.get("notificationIds"),
        mark_all=bool(data.get("markAll")),
    )
    db.session.commit()
    return jsonify({"updated": updated})
