"""Shared test fixtures for the taskbord test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, rate limits off)
- client: Flask test client
- db_session: clean database per test (tables created/dropped)
- seed_data: bord owner, two employees, an outsider, an organization,
  a linked bord, personal workspaces and an accepted owner<->alice friendship
- login_as: returns a test client logged in as the given email

Tables are created and dropped in their own app contexts rather than one
held open for the whole test: each request then gets a fresh `g`, so the
user cached by Flask-Login never leaks between clients.
"""

import pytest
from werkzeug.security import generate_password_hash

from taskbord import create_app
from taskbord.extensions import db as _db
from taskbord.models.bord import Bord
from taskbord.models.organization import EmployeeMembership, Organization
from taskbord.models.user import User
from taskbord.models.workspace import Friend, Workspace

PASSWORD = "password123"
# Hash once; hashing is deliberately slow
PASSWORD_HASH = generate_password_hash(PASSWORD)


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
    yield _db
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def login_as(app):
    """Log in through the API and return a client holding the session."""

    def _login(email, password=PASSWORD):
        c = app.test_client()
        resp = c.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return c

    return _login


@pytest.fixture
def seed_data(app, db_session):
    """Seed an organization with one bord and its people.

    Returns a dict of plain IDs so tests can use them across app contexts.
    """
    with app.app_context():
        # --- Users ---
        owner = User(email="owner@example.com", password_hash=PASSWORD_HASH, full_name="Olivia Owner")
        alice = User(email="alice@example.com", password_hash=PASSWORD_HASH, full_name="Alice Adams")
        bob = User(email="bob@example.com", password_hash=PASSWORD_HASH, full_name="Bob Brown")
        carol = User(email="carol@example.com", password_hash=PASSWORD_HASH, full_name="Carol Cruz")
        _db.session.add_all([owner, alice, bob, carol])
        _db.session.flush()

        # --- Organization + employees ---
        org = Organization(name="Acme Co", owner_id=owner.id)
        _db.session.add(org)
        _db.session.flush()
        _db.session.add_all([
            EmployeeMembership(organization_id=org.id, user_id=alice.id),
            EmployeeMembership(organization_id=org.id, user_id=bob.id),
        ])

        # --- Bord ---
        bord = Bord(
            organization_id=org.id,
            local_board_id="board-1",
            title="Launch Plan",
            owner_id=owner.id,
        )
        _db.session.add(bord)

        # --- Personal workspaces (carol has none) ---
        workspaces = {}
        for user in (owner, alice, bob):
            ws = Workspace(owner_id=user.id, type="personal", name=f"{user.full_name}'s workspace")
            _db.session.add(ws)
            workspaces[user.id] = ws
        _db.session.flush()

        # --- Accepted friendship, both directions ---
        _db.session.add_all([
            Friend(
                workspace_id=workspaces[owner.id].id,
                owner_id=owner.id,
                friend_user_id=alice.id,
                email=alice.email,
                status="accepted",
            ),
            Friend(
                workspace_id=workspaces[alice.id].id,
                owner_id=alice.id,
                friend_user_id=owner.id,
                email=owner.email,
                status="accepted",
            ),
        ])

        _db.session.commit()

        return {
            "owner_id": owner.id,
            "owner_email": owner.email,
            "alice_id": alice.id,
            "alice_email": alice.email,
            "bob_id": bob.id,
            "bob_email": bob.email,
            "carol_id": carol.id,
            "carol_email": carol.email,
            "org_id": org.id,
            "bord_id": bord.id,
            "owner_workspace_id": workspaces[owner.id].id,
            "alice_workspace_id": workspaces[alice.id].id,
            "bob_workspace_id": workspaces[bob.id].id,
        }
