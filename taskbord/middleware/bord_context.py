"""Bord context middleware — resolves bord_id to the Bord row.

Runs before every request to bord routes (/api/bords/<bord_id>/*).
Sets g.bord (or None when the id is unknown) and g.is_bord_owner.

The lookup only happens for authenticated users so that an anonymous
request gets a 401 from login_required rather than a 404 that would
reveal whether the bord exists.
"""

from flask import g, request
from flask_login import current_user

from taskbord.extensions import db
from taskbord.models.bord import Bord


def resolve_bord():
    """Before-request hook for routes with a `bord_id` URL parameter."""
    if request.view_args is None:
        return
    bord_id = request.view_args.get("bord_id")
    if bord_id is None:
        return

    g.bord = None
    g.is_bord_owner = False
    if not current_user.is_authenticated:
        return

    bord = db.session.get(Bord, bord_id)
    if bord is None:
        return

    g.bord = bord
    g.is_bord_owner = bord.owner_id == current_user.id


def init_bord_middleware(app):
    """Register the bord resolver as a before_request hook."""
    app.before_request(resolve_bord)
