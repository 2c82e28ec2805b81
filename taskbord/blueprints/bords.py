"""Bords blueprint — /api/bords/*

Organization-mode delegation. Every write is owner-only and lands as a
draft; nothing reaches an employee until the owner publishes.

Route Map:
  GET    /api/bords                                   — Bords I own or work on
  POST   /api/bords                                   — Link a local board
  GET    /api/bords/<bord_id>/assignments             — Assignments + unpublished count
  POST   /api/bords/<bord_id>/assignments             — Create (or merge) a draft
  PUT    /api/bords/<bord_id>/assignments/<id>        — Edit an assignment
  DELETE /api/bords/<bord_id>/assignments/<id>        — Remove an assignment
  POST   /api/bords/<bord_id>/assignments/owner-sync  — Mirror owner board edits
  POST   /api/bords/<bord_id>/publish                 — Publish pending changes
  GET    /api/bords/<bord_id>/snapshots               — Publish history
"""

from flask import Blueprint, current_app, g, jsonify, request
from flask_login import current_user, login_required

from taskbord.decorators import bord_owner_required
from taskbord.extensions import db, limiter
from taskbord.services import (
    assignment_service,
    bord_service,
    notification_service,
    owner_sync_service,
    publish_service,
)

bords_bp = Blueprint("bords", __name__, url_prefix="/api/bords")

# camelCase request field -> service keyword
EDITABLE_FIELDS = {
    "content": "content",
    "priority": "priority",
    "dueDate": "due_date",
    "executionNote": "execution_note",
    "assignedTo": "assigned_to",
}


def _json():
    return request.get_json(silent=True) or {}


def _publish_limit():
    return current_app.config.get("PUBLISH_RATE_LIMIT", "20 per minute")


# ─── Bords ───────────────────────────────────────────────────────

@bords_bp.route("", methods=["GET"])
@login_required
def list_bords():
    bords = bord_service.list_bords_for_user(current_user.id)
    return jsonify({"bords": [bord.to_dict(role) for bord, role in bords]})


@bords_bp.route("", methods=["POST"])
@login_required
def link_bord():
    data = _json()
    bord, created = bord_service.link_bord(
        current_user.id,
        data.get("organizationId"),
        data.get("localBoardId"),
        data.get("title"),
    )
    db.session.commit()
    return jsonify({"bord": bord.to_dict()}), 201 if created else 200


# ─── Assignments ─────────────────────────────────────────────────

@bords_bp.route("/<bord_id>/assignments", methods=["GET"])
@bord_owner_required
def list_assignments(bord_id):
    assignments, tracker = assignment_service.list_for_bord(g.bord)
    return jsonify({
        "assignments": [a.to_dict() for a in assignments],
        "unpublishedChanges": tracker,
    })


@bords_bp.route("/<bord_id>/assignments", methods=["POST"])
@bord_owner_required
def create_assignment(bord_id):
    data = _json()
    assignment, created = assignment_service.create_or_merge(
        g.bord,
        current_user.id,
        source_type=data.get("sourceType"),
        source_id=data.get("sourceId"),
        assigned_to=data.get("assignedTo"),
        content=data.get("content"),
        priority=data.get("priority"),
        due_date=data.get("dueDate"),
        execution_note=data.get("executionNote"),
        column_id=data.get("columnId"),
        column_title=data.get("columnTitle"),
        available_columns=data.get("availableColumns"),
    )
    db.session.commit()
    return jsonify({"assignment": assignment.to_dict()}), 201 if created else 200


@bords_bp.route("/<bord_id>/assignments/<assignment_id>", methods=["PUT"])
@bord_owner_required
def update_assignment(bord_id, assignment_id):
    data = _json()
    changes = {
        key: data[field] for field, key in EDITABLE_FIELDS.items() if field in data
    }
    assignment = assignment_service.update_assignment(
        g.bord, assignment_id, current_user.id, changes
    )
    db.session.commit()
    return jsonify({"assignment": assignment.to_dict()})


@bords_bp.route("/<bord_id>/assignments/<assignment_id>", methods=["DELETE"])
@bord_owner_required
def delete_assignment(bord_id, assignment_id):
    assignment_service.soft_delete(g.bord, assignment_id, current_user.id)
    db.session.commit()
    return jsonify({"success": True})


@bords_bp.route("/<bord_id>/assignments/owner-sync", methods=["POST"])
@bord_owner_required
def owner_sync(bord_id):
    data = _json()
    updated = owner_sync_service.sync_source_item(
        g.bord,
        current_user.id,
        source_type=data.get("sourceType"),
        source_id=data.get("sourceId"),
        action=data.get("action"),
        completed=data.get("completed"),
        column_id=data.get("columnId"),
        column_title=data.get("columnTitle"),
    )
    db.session.commit()
    return jsonify({"updated": updated})


# ─── Publish ─────────────────────────────────────────────────────

@bords_bp.route("/<bord_id>/publish", methods=["POST"])
@limiter.limit(_publish_limit)
@bord_owner_required
def publish(bord_id):
    data = _json()
    request_key = request.headers.get("Idempotency-Key") or data.get("requestKey")
    result = publish_service.publish_bord(
        g.bord,
        current_user.id,
        force=bool(data.get("force")),
        request_key=request_key,
    )
    db.session.commit()
    body = {"publish": result.to_dict()}

    # Best-effort, after the publish is durable
    notification_service.deliver(result.notifications)
    return jsonify(body)


@bords_bp.route("/<bord_id>/snapshots", methods=["GET"])
@bord_owner_required
def list_snapshots(bord_id):
    snapshots = publish_service.list_snapshots(g.bord)
    return jsonify({"snapshots": [s.to_dict() for s in snapshots]})
