"""Tests for the friendship directory — /api/workspaces/friends."""

from taskbord.models.notification import Notification
from taskbord.models.workspace import Friend

URL = "/api/workspaces/friends"


class TestFriendRequests:

    def test_list_friends(self, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        friends = owner.get(URL).get_json()["friends"]
        assert [(f["userId"], f["status"]) for f in friends] == [(seed_data["alice_id"], "accepted")]
        assert friends[0]["fullName"] == "Alice Adams"

    def test_request_creates_pending_and_notifies(self, app, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        resp = owner.post(URL, json={"email": "BOB@example.com ", "nickname": "Bobby"})
        assert resp.status_code == 201
        friend = resp.get_json()["friend"]
        assert friend["status"] == "pending"
        assert friend["nickname"] == "Bobby"

        with app.app_context():
            [note] = Notification.query.filter_by(user_id=seed_data["bob_id"]).all()
            assert note.type == "friend_request"
            assert note.message == "Olivia Owner wants to add you as a friend"

    def test_request_errors(self, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        cases = [
            ({}, "Email is required"),
            ({"email": "ghost@example.com"}, "No user found with that email"),
            ({"email": seed_data["owner_email"]}, "You cannot add yourself as a friend"),
            ({"email": seed_data["alice_email"]}, "This person is already your friend"),
        ]
        for body, message in cases:
            resp = owner.post(URL, json=body)
            assert resp.status_code == 400
            assert resp.get_json()["error"] == message

    def test_request_without_workspace(self, login_as, seed_data):
        carol = login_as(seed_data["carol_email"])
        resp = carol.post(URL, json={"email": seed_data["bob_email"]})
        assert resp.status_code == 404


class TestAcceptFriend:

    def _request(self, login_as, seed_data):
        owner = login_as(seed_data["owner_email"])
        friend_id = owner.post(URL, json={"email": seed_data["bob_email"]}).get_json()["friend"]["id"]
        return owner, friend_id

    def test_accept_creates_reciprocal_link(self, app, login_as, seed_data):
        owner, friend_id = self._request(login_as, seed_data)
        bob = login_as(seed_data["bob_email"])

        resp = bob.post(f"{URL}/{friend_id}/accept")
        assert resp.status_code == 200
        assert resp.get_json()["friend"]["status"] == "accepted"

        with app.app_context():
            reciprocal = Friend.query.filter_by(
                workspace_id=seed_data["bob_workspace_id"], friend_user_id=seed_data["owner_id"]
            ).first()
            assert reciprocal is not None
            assert reciprocal.status == "accepted"
            [note] = Notification.query.filter_by(
                user_id=seed_data["owner_id"], type="friend_accepted"
            ).all()
            assert note.message == "Bob Brown accepted your friend request"

        # Both directions can now delegate
        task = {"sourceType": "note", "sourceId": "n-1", "content": "Lunch?"}
        assert owner.post(
            "/api/personal/assignments", json=dict(task, assignedTo=seed_data["bob_id"])
        ).status_code == 201
        assert bob.post(
            "/api/personal/assignments", json=dict(task, assignedTo=seed_data["owner_id"])
        ).status_code == 201

    def test_only_invited_user_may_accept(self, login_as, seed_data):
        owner, friend_id = self._request(login_as, seed_data)
        resp = owner.post(f"{URL}/{friend_id}/accept")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "You cannot accept this request"

    def test_accept_twice(self, login_as, seed_data):
        _, friend_id = self._request(login_as, seed_data)
        bob = login_as(seed_data["bob_email"])
        bob.post(f"{URL}/{friend_id}/accept")
        resp = bob.post(f"{URL}/{friend_id}/accept")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Already accepted"

    def test_accept_unknown(self, login_as, seed_data):
        bob = login_as(seed_data["bob_email"])
        assert bob.post(f"{URL}/missing/accept").status_code == 404
