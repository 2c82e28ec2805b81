"""Tests for the notification inbox — /api/notifications."""

from taskbord.extensions import db
from taskbord.models.assignment import TaskAssignment
from taskbord.models.notification import Notification
from taskbord.services import notification_service


def _add(app, user_id, count=1, type_="task_assigned"):
    with app.app_context():
        for i in range(count):
            db.session.add(Notification(
                user_id=user_id, type=type_, title="New Task Assigned", message=f"Task {i}",
            ))
        db.session.commit()
        return [n.id for n in Notification.query.filter_by(user_id=user_id).all()]


class TestInbox:

    def test_list_and_unread_count(self, app, login_as, seed_data):
        _add(app, seed_data["alice_id"], count=3)
        _add(app, seed_data["bob_id"], count=2)
        alice = login_as(seed_data["alice_email"])

        body = alice.get("/api/notifications").get_json()
        assert len(body["notifications"]) == 3
        assert body["unreadCount"] == 3
        assert all(n["userId"] == seed_data["alice_id"] for n in body["notifications"])

    def test_list_is_capped(self, app, login_as, seed_data, monkeypatch):
        monkeypatch.setitem(app.config, "NOTIFICATION_LIST_LIMIT", 2)
        _add(app, seed_data["alice_id"], count=5)
        alice = login_as(seed_data["alice_email"])
        body = alice.get("/api/notifications").get_json()
        assert len(body["notifications"]) == 2
        assert body["unreadCount"] == 5

    def test_mark_some_read(self, app, login_as, seed_data):
        ids = _add(app, seed_data["alice_id"], count=3)
        alice = login_as(seed_data["alice_email"])
        resp = alice.put("/api/notifications", json={"notificationIds": ids[:2]})
        assert resp.get_json() == {"updated": 2}
        assert alice.get("/api/notifications").get_json()["unreadCount"] == 1

    def test_mark_all_read(self, app, login_as, seed_data):
        _add(app, seed_data["alice_id"], count=3)
        alice = login_as(seed_data["alice_email"])
        alice.put("/api/notifications", json={"markAll": True})
        assert alice.get("/api/notifications").get_json()["unreadCount"] == 0

    def test_cannot_mark_someone_elses(self, app, login_as, seed_data):
        bob_ids = _add(app, seed_data["bob_id"], count=1)
        alice = login_as(seed_data["alice_email"])
        resp = alice.put("/api/notifications", json={"notificationIds": bob_ids})
        assert resp.get_json() == {"updated": 0}
        with app.app_context():
            assert db.session.get(Notification, bob_ids[0]).is_read is False

    def test_unauthenticated(self, client, seed_data):
        assert client.get("/api/notifications").status_code == 401


class TestNotificationHelpers:

    def test_counterpart_of(self):
        a = TaskAssignment(assigned_to="u-alice", assigned_by="u-owner")
        assert notification_service.counterpart_of(a, "u-alice") == "u-owner"
        assert notification_service.counterpart_of(a, "u-owner") == "u-alice"
        assert notification_service.counterpart_of(a, "u-stranger") is None

        self_reminder = TaskAssignment(assigned_to="u-alice", assigned_by="u-alice")
        assert notification_service.counterpart_of(self_reminder, "u-alice") is None

    def test_preview_truncates(self, app):
        with app.app_context():
            text = notification_service.preview("x" * 100)
            assert text == "x" * 80 + "..."
            assert notification_service.preview("short") == "short"

    def test_build_drops_empty_metadata(self):
        payload = notification_service.build("u-1", "task_assigned", "T", "M", bordId=None, sourceId="s-1")
        assert payload["metadata"] == {"sourceId": "s-1"}

    def test_deliver_swallows_errors(self, app, seed_data):
        with app.app_context():
            bad = [{"user_id": seed_data["alice_id"], "type": "task_assigned", "title": None, "message": "x"}]
            # title is NOT NULL, so the commit fails
            assert notification_service.deliver(bad) == 0
            assert Notification.query.count() == 0

            good = [notification_service.build(seed_data["alice_id"], "task_assigned", "T", "M")]
            assert notification_service.deliver(good) == 1
            assert Notification.query.count() == 1
