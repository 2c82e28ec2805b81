"""Execution blueprint — /api/execution/*

The employee side of organization mode. Employees only ever see released
tasks; their changes go live immediately and inform the bord owner.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from taskbord.extensions import db
from taskbord.services import assignment_service, notification_service
from taskbord.utils import isoformat

execution_bp = Blueprint("execution", __name__, url_prefix="/api/execution")


@execution_bp.route("/tasks", methods=["GET"])
@login_required
def list_tasks():
    groups, organizations = assignment_service.list_execution_tasks(current_user.id)
    return jsonify({"tasksByOrganization": groups, "organizations": organizations})


@execution_bp.route("/tasks/<assignment_id>/complete", methods=["POST"])
@login_required
def complete_task(assignment_id):
    assignment, notifications = assignment_service.toggle_completion(
        assignment_id, current_user.id
    )
    db.session.commit()
    body = {
        "task": {
            "id": assignment.id,
            "status": assignment.status,
            "completedAt": isoformat(assignment.completed_at),
        }
    }
    notification_service.deliver(notifications)
    return jsonify(body)


@execution_bp.route("/tasks/<assignment_id>/update", methods=["PUT"])
@login_required
def update_task(assignment_id):
    data = request.get_json(silent=True) or {}
    _, view, notifications = assignment_service.employee_update(
        assignment_id,
        current_user.id,
        column_id=data.get("columnId"),
        column_title=data.get("columnTitle"),
        content=data.get("content"),
    )
    db.session.commit()
    notification_service.deliver(notifications)
    return jsonify({"task": view})
