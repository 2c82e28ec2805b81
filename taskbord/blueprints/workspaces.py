"""Workspaces blueprint — /api/workspaces/*

The friendship directory behind personal-mode assignments.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from taskbord.extensions import db, limiter
from taskbord.services import friend_service, notification_service

workspaces_bp = Blueprint("workspaces", __name__, url_prefix="/api/workspaces")


@workspaces_bp.route("/friends", methods=["GET"])
@login_required
def list_friends():
    friends = friend_service.list_friends(current_user.id)
    return jsonify({"friends": [f.to_dict() for f in friends]})


@workspaces_bp.route("/friends", methods=["POST"])
@login_required
@limiter.limit("30 per hour")
def add_friend():
    data = request.get_json(silent=True) or {}
    friend, notifications = friend_service.request_friend(
        current_user.id, data.get("email"), data.get("nickname")
    )
    db.session.commit()
    body = {"friend": friend.to_dict()}
    notification_service.deliver(notifications)
    return jsonify(body), 201


@workspaces_bp.route("/friends/<friend_id>/accept", methods=["POST"])
@login_required
def accept_friend(friend_id):
    friend, notifications = friend_service.accept_friend(friend_id, current_user.id)
    db.session.commit()
    body = {"friend": friend.to_dict()}
    notification_service.deliver(notifications)
    return jsonify(body)
