"""Tests for personal mode — /api/personal/assignments.

Tests:
- Self reminders and tasks for accepted friends land published
- Non-friends and users without a personal workspace are refused
- Kanban single-assignee rule per assigner
- Symmetric collaboration: either party moves/completes, only the
  assigner edits content or deletes
"""

from taskbord.extensions import db
from taskbord.models.assignment import TaskAssignment
from taskbord.models.notification import Notification
from taskbord.models.publish import ChangeTracker, PublishSnapshot

URL = "/api/personal/assignments"


def _payload(**overrides):
    data = {"sourceType": "reminder_item", "sourceId": "rem-1", "content": "Buy printer ink"}
    data.update(overrides)
    return data


class TestCreatePersonal:

    def test_self_reminder(self, app, login_as, seed_data):
        alice = login_as(seed_data["alice_email"])
        resp = alice.post(URL, json=_payload())
        assert resp.status_code == 201
        body = resp.get_json()["assignment"]
        assert body["contextType"] == "personal"
        assert body["status"] == "assigned"
        assert body["lifecycleStage"] == "live"
        assert body["priority"] == "normal"
        assert body["publishedAt"] is not None
        assert body["assignedTo"] == seed_data["alice_id"]
        assert body["workspaceId"] == seed_data["alice_workspace_id"]
        assert body["bordId"] is None

        with app.app_context():
            assert Notification.query.count() == 0
            # no staging artifacts
            assert ChangeTracker.query.count() == 0
            assert PublishSnapshot.query.count() == 0

    def test_assign_to_friend_notifies(self, app, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        resp = owner.post(URL, json=_payload(assignedTo=seed_data["alice_id"]))
        assert resp.status_code == 201

        with app.app_context():
            [note] = Notification.query.filter_by(user_id=seed_data["alice_id"]).all()
            assert note.type == "task_assigned"
            assert note.message == 'Olivia Owner sent you a reminder: "Buy printer ink"'

        alice = login_as(seed_data["alice_email"])
        received = alice.get(f"{URL}?filter=received").get_json()["assignments"]
        assert len(received) == 1

    def test_non_friend_rejected(self, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        resp = owner.post(URL, json=_payload(assignedTo=seed_data["bob_id"]))
        assert resp.status_code == 400
        assert resp.get_json()["error"] == (
            "You can only assign personal tasks to yourself or your accepted friends"
        )

    def test_pending_friend_rejected(self, app, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        owner.post("/api/workspaces/friends", json={"email": seed_data["bob_email"]})
        resp = owner.post(URL, json=_payload(assignedTo=seed_data["bob_id"]))
        assert resp.status_code == 400

    def test_no_personal_workspace(self, login_as, seed_data):
        carol = login_as(seed_data["carol_email"])
        resp = carol.post(URL, json=_payload())
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Personal workspace not found"

    def test_missing_fields(self, login_as, seed_data):
        alice = login_as(seed_data["alice_email"])
        resp = alice.post(URL, json={"sourceType": "note"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "sourceType, sourceId, and content are required"

    def test_merge_same_item_same_person(self, app, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        owner.post(URL, json=_payload(assignedTo=seed_data["alice_id"]))
        resp = owner.post(URL, json=_payload(assignedTo=seed_data["alice_id"], content="Buy toner"))
        assert resp.status_code == 200
        assert resp.get_json()["assignment"]["content"] == "Buy toner"

        with app.app_context():
            assert TaskAssignment.query.filter_by(source_id="rem-1").count() == 1

    def test_kanban_one_person(self, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        card = _payload(sourceType="kanban_task", sourceId="card-1")
        assert owner.post(URL, json=dict(card, assignedTo=seed_data["alice_id"])).status_code == 201

        resp = owner.post(URL, json=card)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == (
            "Kanban tasks can only be assigned to one person. Remove the current assignee first."
        )

    def test_kanban_scope_is_per_assigner(self, login_as, seed_data):
        """Two people's personal boards can use the same card id."""
        owner = login_as(seed_data["owner_email"])
        alice = login_as(seed_data["alice_email"])
        card = _payload(sourceType="kanban_task", sourceId="card-1")
        assert owner.post(URL, json=card).status_code == 201
        assert alice.post(URL, json=card).status_code == 201


class TestListPersonal:

    def test_filters(self, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        alice = login_as(seed_data["alice_email"])
        owner.post(URL, json=_payload(sourceId="rem-1", assignedTo=seed_data["alice_id"]))
        alice.post(URL, json=_payload(sourceId="rem-2"))

        def ids(client, filter_):
            return {a["sourceId"] for a in client.get(f"{URL}?filter={filter_}").get_json()["assignments"]}

        assert ids(alice, "received") == {"rem-1", "rem-2"}
        assert ids(alice, "sent") == {"rem-2"}
        assert ids(alice, "all") == {"rem-1", "rem-2"}
        assert ids(owner, "sent") == {"rem-1"}
        assert ids(owner, "received") == set()

    def test_invalid_filter(self, login_as, seed_data):
        alice = login_as(seed_data["alice_email"])
        assert alice.get(f"{URL}?filter=everything").status_code == 400


class TestPersonalPermissions:

    def _shared(self, login_as, seed_data, **overrides):
        owner = login_as(seed_data["owner_email"])
        alice = login_as(seed_data["alice_email"])
        created = owner.post(
            URL, json=_payload(assignedTo=seed_data["alice_id"], **overrides)
        ).get_json()["assignment"]
        return owner, alice, created["id"]

    def test_assigner_edits(self, login_as, seed_data):
        owner, _, task_id = self._shared(login_as, seed_data)
        resp = owner.put(f"{URL}/{task_id}", json={"content": "Buy two cartridges", "executionNote": "Black only"})
        assert resp.status_code == 200
        body = resp.get_json()["assignment"]
        assert body["content"] == "Buy two cartridges"
        assert body["executionNote"] == "Black only"
        assert body["status"] == "assigned"

    def test_assignee_cannot_edit(self, login_as, seed_data):
        _, alice, task_id = self._shared(login_as, seed_data)
        assert alice.put(f"{URL}/{task_id}", json={"content": "Nope"}).status_code == 403

    def test_assignee_cannot_delete(self, login_as, seed_data):
        _, alice, task_id = self._shared(login_as, seed_data)
        assert alice.delete(f"{URL}/{task_id}").status_code == 403

    def test_assigner_deletes(self, app, login_as, seed_data):
        owner, alice, task_id = self._shared(login_as, seed_data)
        assert owner.delete(f"{URL}/{task_id}").status_code == 200
        assert alice.get(URL).get_json()["assignments"] == []
        with app.app_context():
            assert db.session.get(TaskAssignment, task_id).lifecycle_stage == "discarded"

    def test_outsider_sees_nothing(self, login_as, seed_data):
        _, _, task_id = self._shared(login_as, seed_data)
        bob = login_as(seed_data["bob_email"])
        assert bob.post(f"{URL}/{task_id}/complete").status_code == 403

    def test_assignee_completes_and_assigner_is_told(self, app, login_as, seed_data):
        _, alice, task_id = self._shared(login_as, seed_data)
        resp = alice.post(f"{URL}/{task_id}/complete")
        assert resp.status_code == 200
        assert resp.get_json()["assignment"]["status"] == "completed"

        with app.app_context():
            [note] = Notification.query.filter_by(
                user_id=seed_data["owner_id"], type="task_completed"
            ).all()
            assert note.message == 'Alice Adams completed: "Buy printer ink"'

    def test_assigner_completes_and_assignee_is_told(self, app, login_as, seed_data):
        owner, _, task_id = self._shared(login_as, seed_data)
        owner.post(f"{URL}/{task_id}/complete")
        with app.app_context():
            assert Notification.query.filter_by(
                user_id=seed_data["alice_id"], type="task_completed"
            ).count() == 1

    def test_self_reminder_completion_is_silent(self, app, login_as, seed_data):
        alice = login_as(seed_data["alice_email"])
        task_id = alice.post(URL, json=_payload()).get_json()["assignment"]["id"]
        alice.post(f"{URL}/{task_id}/complete")
        with app.app_context():
            assert Notification.query.count() == 0

    def test_assignee_moves_column(self, app, login_as, seed_data):
        owner, alice, task_id = self._shared(
            login_as, seed_data, sourceType="kanban_task", sourceId="card-1",
            columnId="todo", columnTitle="To Do",
        )
        resp = alice.put(f"{URL}/{task_id}/update", json={"columnId": "done", "columnTitle": "Done"})
        assert resp.status_code == 200
        task = resp.get_json()["task"]
        assert task["columnId"] == "done"
        assert task["columnTitle"] == "Done"

        with app.app_context():
            [note] = Notification.query.filter_by(
                user_id=seed_data["owner_id"], type="task_updated"
            ).all()
            assert 'Task moved from "To Do" to "Done"' in note.message

    def test_assignee_cannot_change_content_via_move(self, login_as, seed_data):
        _, alice, task_id = self._shared(login_as, seed_data)
        resp = alice.put(f"{URL}/{task_id}/update", json={"content": "Something else"})
        assert resp.status_code == 403

    def test_assigner_changes_content_via_move(self, app, login_as, seed_data):
        owner, _, task_id = self._shared(login_as, seed_data)
        resp = owner.put(f"{URL}/{task_id}/update", json={"content": "Buy paper too"})
        assert resp.status_code == 200
        assert resp.get_json()["task"]["content"] == "Buy paper too"
        with app.app_context():
            assert Notification.query.filter_by(
                user_id=seed_data["alice_id"], type="task_updated"
            ).count() == 1

    def test_move_completed_rejected(self, login_as, seed_data):
        _, alice, task_id = self._shared(login_as, seed_data, sourceType="kanban_task", sourceId="card-1")
        alice.post(f"{URL}/{task_id}/complete")
        resp = alice.put(f"{URL}/{task_id}/update", json={"columnId": "done"})
        assert resp.status_code == 400

    def test_personal_rows_not_in_execution(self, login_as, seed_data):
        _, alice, task_id = self._shared(login_as, seed_data)
        assert alice.post(f"/api/execution/tasks/{task_id}/complete").status_code == 404
