"""Tests for owner-side sync — /api/bords/<bord_id>/assignments/owner-sync."""

from taskbord.extensions import db
from taskbord.models.assignment import TaskAssignment
from taskbord.models.bord import Bord
from taskbord.models.publish import ChangeTracker
from taskbord.services import assignment_service, publish_service


def _url(seed_data):
    return f"/api/bords/{seed_data['bord_id']}/assignments/owner-sync"


def _seed(app, seed_data, source_type="checklist_item", source_id="item-1", publish=True):
    with app.app_context():
        bord = db.session.get(Bord, seed_data["bord_id"])
        a, _ = assignment_service.create_or_merge(
            bord, seed_data["owner_id"], source_type, source_id,
            seed_data["alice_id"], "Check the proofs",
        )
        if publish:
            publish_service.publish_bord(bord, seed_data["owner_id"])
        db.session.commit()
        return a.id


class TestToggleComplete:

    def test_completes_released_rows(self, app, login_as, seed_data):
        task_id = _seed(app, seed_data)
        owner = login_as(seed_data["owner_email"])

        resp = owner.post(_url(seed_data), json={
            "sourceType": "checklist_item", "sourceId": "item-1",
            "action": "toggle_complete", "completed": True,
        })
        assert resp.status_code == 200
        assert resp.get_json() == {"updated": 1}

        with app.app_context():
            row = db.session.get(TaskAssignment, task_id)
            assert row.status == "completed"
            assert row.completed_at is not None

        resp = owner.post(_url(seed_data), json={
            "sourceType": "checklist_item", "sourceId": "item-1",
            "action": "toggle_complete", "completed": False,
        })
        assert resp.get_json() == {"updated": 1}
        with app.app_context():
            row = db.session.get(TaskAssignment, task_id)
            assert row.status == "assigned"
            assert row.completed_at is None

    def test_drafts_untouched(self, app, login_as, seed_data):
        task_id = _seed(app, seed_data, publish=False)
        owner = login_as(seed_data["owner_email"])
        resp = owner.post(_url(seed_data), json={
            "sourceType": "checklist_item", "sourceId": "item-1",
            "action": "toggle_complete", "completed": True,
        })
        assert resp.get_json() == {"updated": 0}
        with app.app_context():
            assert db.session.get(TaskAssignment, task_id).status == "draft"

    def test_not_staged(self, app, login_as, seed_data):
        _seed(app, seed_data)
        owner = login_as(seed_data["owner_email"])
        owner.post(_url(seed_data), json={
            "sourceType": "checklist_item", "sourceId": "item-1",
            "action": "toggle_complete", "completed": True,
        })
        with app.app_context():
            tracker = ChangeTracker.query.filter_by(bord_id=seed_data["bord_id"]).first()
            assert tracker.change_count == 0


class TestMoveColumn:

    def test_moves_every_row_including_drafts(self, app, login_as, seed_data):
        task_id = _seed(app, seed_data, source_type="kanban_task", source_id="card-1", publish=False)
        owner = login_as(seed_data["owner_email"])
        resp = owner.post(_url(seed_data), json={
            "sourceType": "kanban_task", "sourceId": "card-1",
            "action": "move_column", "columnId": "done", "columnTitle": "Done",
        })
        assert resp.get_json() == {"updated": 1}
        with app.app_context():
            row = db.session.get(TaskAssignment, task_id)
            assert (row.column_id, row.column_title) == ("done", "Done")

    def test_move_requires_column(self, app, login_as, seed_data):
        _seed(app, seed_data, source_type="kanban_task", source_id="card-1")
        owner = login_as(seed_data["owner_email"])
        resp = owner.post(_url(seed_data), json={
            "sourceType": "kanban_task", "sourceId": "card-1", "action": "move_column",
        })
        assert resp.status_code == 400


class TestOwnerSyncValidation:

    def test_no_matching_rows(self, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        resp = owner.post(_url(seed_data), json={
            "sourceType": "note", "sourceId": "ghost", "action": "toggle_complete", "completed": True,
        })
        assert resp.status_code == 200
        assert resp.get_json() == {"updated": 0}

    def test_missing_fields(self, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        resp = owner.post(_url(seed_data), json={"sourceType": "note"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "sourceType, sourceId, and action are required"

    def test_unknown_action(self, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        resp = owner.post(_url(seed_data), json={
            "sourceType": "note", "sourceId": "n-1", "action": "archive",
        })
        assert resp.status_code == 400

    def test_employee_forbidden(self, login_as, seed_data):
        alice = login_as(seed_data["alice_email"])
        resp = alice.post(_url(seed_data), json={
            "sourceType": "note", "sourceId": "n-1", "action": "toggle_complete",
        })
        assert resp.status_code == 403
