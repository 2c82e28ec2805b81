"""Friend service — the personal-mode friendship directory.

A friend link lives in the requester's personal workspace and starts out
"pending". Accepting it also creates the reciprocal link in the accepter's
workspace, so either side can send the other personal assignments.

Functions flush but do NOT commit — the caller commits.
"""

from taskbord.errors import NotFoundError, ValidationError
from taskbord.extensions import db
from taskbord.models import audit
from taskbord.models.user import User
from taskbord.models.workspace import Friend, Workspace
from taskbord.services import notification_service
from taskbord.utils import sanitize


def get_personal_workspace(user_id):
    return Workspace.query.filter_by(owner_id=user_id, type="personal").first()


def ensure_personal_workspace(user):
    """Create the user's personal workspace on first use."""
    workspace = get_personal_workspace(user.id)
    if workspace is None:
        workspace = Workspace(
            owner_id=user.id,
            type="personal",
            name=f"{user.display_name}'s workspace",
        )
        db.session.add(workspace)
        db.session.flush()
    return workspace


def is_accepted_friend(owner_id, friend_user_id):
    """True if friend_user_id is an accepted friend in owner's personal workspace."""
    workspace = get_personal_workspace(owner_id)
    if workspace is None:
        return False
    return (
        Friend.query
        .filter_by(
            workspace_id=workspace.id,
            friend_user_id=friend_user_id,
            status="accepted",
        )
        .first()
        is not None
    )


def list_friends(user_id):
    workspace = get_personal_workspace(user_id)
    if workspace is None:
        return []
    return (
        Friend.query
        .filter_by(workspace_id=workspace.id)
        .order_by(Friend.created_at.desc())
        .all()
    )


def request_friend(actor_id, email, nickname=None):
    """Send a friend request by email.

    Returns:
        Tuple of (friend, notifications).

    Raises:
        NotFoundError: actor has no personal workspace.
        ValidationError: unknown email, self-request, or duplicate.
    """
    email = (email or "").lower().strip()
    if not email:
        raise ValidationError("Email is required")

    workspace = get_personal_workspace(actor_id)
    if workspace is None:
        raise NotFoundError("Personal workspace")

    friend_user = User.query.filter_by(email=email).first()
    if friend_user is None:
        raise ValidationError("No user found with that email")
    if friend_user.id == actor_id:
        raise ValidationError("You cannot add yourself as a friend")

    existing = Friend.query.filter_by(
        workspace_id=workspace.id, friend_user_id=friend_user.id
    ).first()
    if existing:
        raise ValidationError("This person is already your friend")

    friend = Friend(
        workspace_id=workspace.id,
        owner_id=actor_id,
        friend_user_id=friend_user.id,
        email=friend_user.email,
        nickname=sanitize(nickname) or None,
        status="pending",
    )
    db.session.add(friend)
    db.session.flush()

    audit.record("friend.requested", actor_user_id=actor_id, friend_id=friend.id)
    db.session.flush()

    sender = notification_service.actor_name(actor_id)
    notifications = [notification_service.build(
        friend_user.id,
        "friend_request",
        "Friend Request",
        f"{sender} wants to add you as a friend",
        friendId=friend.id,
        senderName=sender,
    )]
    return friend, notifications


def accept_friend(friend_id, actor_id):
    """Accept a pending request addressed to actor_id.

    Returns:
        Tuple of (friend, notifications).
    """
    friend = db.session.get(Friend, friend_id) if friend_id else None
    if friend is None:
        raise NotFoundError("Friend request")
    if friend.friend_user_id != actor_id:
        raise ValidationError("You cannot accept this request")
    if friend.status == "accepted":
        raise ValidationError("Already accepted")

    friend.status = "accepted"

    accepter = db.session.get(User, actor_id)
    requester = db.session.get(User, friend.owner_id)
    accepter_ws = ensure_personal_workspace(accepter)
    reciprocal = Friend.query.filter_by(
        workspace_id=accepter_ws.id, friend_user_id=friend.owner_id
    ).first()
    if reciprocal is None and requester is not None:
        db.session.add(Friend(
            workspace_id=accepter_ws.id,
            owner_id=actor_id,
            friend_user_id=requester.id,
            email=requester.email,
            status="accepted",
        ))
    elif reciprocal is not None:
        reciprocal.status = "accepted"
    db.session.flush()

    audit.record("friend.accepted", actor_user_id=actor_id, friend_id=friend.id)
    db.session.flush()

    name = accepter.display_name if accepter else "Someone"
    notifications = [notification_service.build(
        friend.owner_id,
        "friend_accepted",
        "Friend Request Accepted",
        f"{name} accepted your friend request",
        friendId=friend.id,
        senderName=name,
    )]
    return friend, notifications
