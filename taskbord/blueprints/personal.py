"""Personal blueprint — /api/personal/*

Reminders for yourself and tasks for accepted friends. No staging:
every change is visible to the other party as soon as it commits.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from taskbord.extensions import db
from taskbord.services import notification_service, personal_service

personal_bp = Blueprint("personal", __name__, url_prefix="/api/personal")

EDITABLE_FIELDS = {
    "content": "content",
    "dueDate": "due_date",
    "executionNote": "execution_note",
}


def _json():
    return request.get_json(silent=True) or {}


@personal_bp.route("/assignments", methods=["GET"])
@login_required
def list_assignments():
    assignments = personal_service.list_personal_assignments(
        current_user.id, request.args.get("filter", "all")
    )
    return jsonify({"assignments": [a.to_dict() for a in assignments]})


@personal_bp.route("/assignments", methods=["POST"])
@login_required
def create_assignment():
    data = _json()
    assignment, created, notifications = personal_service.create_personal_assignment(
        current_user.id,
        source_type=data.get("sourceType"),
        source_id=data.get("sourceId"),
        content=data.get("content"),
        assigned_to=data.get("assignedTo"),
        due_date=data.get("dueDate"),
        execution_note=data.get("executionNote"),
        column_id=data.get("columnId"),
        column_title=data.get("columnTitle"),
        available_columns=data.get("availableColumns"),
    )
    db.session.commit()
    body = {"assignment": assignment.to_dict()}
    notification_service.deliver(notifications)
    return jsonify(body), 201 if created else 200


@personal_bp.route("/assignments/<assignment_id>", methods=["PUT"])
@login_required
def update_assignment(assignment_id):
    data = _json()
    changes = {
        key: data[field] for field, key in EDITABLE_FIELDS.items() if field in data
    }
    assignment = personal_service.update_personal_assignment(
        assignment_id, current_user.id, changes
    )
    db.session.commit()
    return jsonify({"assignment": assignment.to_dict()})


@personal_bp.route("/assignments/<assignment_id>", methods=["DELETE"])
@login_required
def delete_assignment(assignment_id):
    personal_service.delete_personal_assignment(assignment_id, current_user.id)
    db.session.commit()
    return jsonify({"success": True})


@personal_bp.route("/assignments/<assignment_id>/complete", methods=["POST"])
@login_required
def complete_assignment(assignment_id):
    assignment, notifications = personal_service.toggle_personal_completion(
        assignment_id, current_user.id
    )
    db.session.commit()
    body = {"assignment": assignment.to_dict()}
    notification_service.deliver(notifications)
    return jsonify(body)


@personal_bp.route("/assignments/<assignment_id>/update", methods=["PUT"])
@login_required
def move_assignment(assignment_id):
    data = _json()
    assignment, notifications = personal_service.move_personal_assignment(
        assignment_id,
        current_user.id,
        column_id=data.get("columnId"),
        column_title=data.get("columnTitle"),
        content=data.get("content"),
    )
    db.session.commit()
    body = {"task": assignment.to_dict()}
    notification_service.deliver(notifications)
    return jsonify(body)
