"""Bord service — linking boards to organizations and owner checks.

Functions flush but do NOT commit — the caller commits.
"""

from taskbord.errors import ForbiddenError, NotFoundError, ValidationError
from taskbord.extensions import db
from taskbord.models import audit
from taskbord.models.bord import Bord
from taskbord.models.organization import EmployeeMembership, Organization
from taskbord.utils import sanitize


def get_bord(bord_id):
    """Load a bord or raise NotFoundError."""
    bord = db.session.get(Bord, bord_id) if bord_id else None
    if bord is None:
        raise NotFoundError("Bord")
    return bord


def require_owner(bord, actor_id):
    """Every organization-mode write is owner-only."""
    if bord.owner_id != actor_id:
        raise ForbiddenError()
    return bord


def link_bord(actor_id, organization_id, local_board_id, title):
    """Create the server-side reference for a local board.

    Linking the same local board twice returns the existing Bord.

    Returns:
        Tuple of (bord, created).

    Raises:
        ValidationError: missing fields, or the actor does not own the org.
    """
    title = sanitize(title)
    if not organization_id or not local_board_id or not title:
        raise ValidationError("organizationId, localBoardId, and title are required")

    org = db.session.get(Organization, organization_id)
    if org is None or org.owner_id != actor_id:
        raise ValidationError("Invalid organization")

    existing = Bord.query.filter_by(
        organization_id=organization_id,
        local_board_id=local_board_id,
    ).first()
    if existing:
        return existing, False

    bord = Bord(
        organization_id=organization_id,
        local_board_id=local_board_id,
        title=title,
        owner_id=actor_id,
    )
    db.session.add(bord)
    db.session.flush()

    audit.record(
        "bord.linked",
        actor_user_id=actor_id,
        bord_id=bord.id,
        organization_id=organization_id,
        local_board_id=local_board_id,
    )
    db.session.flush()
    return bord, True


def list_bords_for_user(user_id):
    """Bords the user owns, plus bords of organizations that employ them.

    Returns:
        List of (bord, role) tuples, role being "owner" or "employee".
    """
    owned = Bord.query.filter_by(owner_id=user_id).order_by(Bord.created_at.desc()).all()
    owned_ids = {b.id for b in owned}

    org_ids = [
        m.organization_id
        for m in EmployeeMembership.query.filter_by(user_id=user_id).all()
    ]
    employed = []
    if org_ids:
        employed = (
            Bord.query
            .filter(Bord.organization_id.in_(org_ids))
            .order_by(Bord.created_at.desc())
            .all()
        )

    result = [(b, "owner") for b in owned]
    result.extend((b, "employee") for b in employed if b.id not in owned_ids)
    return result
