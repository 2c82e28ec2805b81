"""
Custom route decorators for access control.

- bord_owner_required: ensures user is logged in AND owns the bord resolved
  from the current bord_id (every organization-mode write is owner-only).
"""

from functools import wraps

from flask import g
from flask_login import login_required

from taskbord.errors import ForbiddenError, NotFoundError


def bord_owner_required(f):
    """Require login + ownership of the bord in the URL."""

    @wraps(f)
    @login_required
    def decorated(*args, **kwargs):
        # g.bord is set by the bord context middleware
        if getattr(g, "bord", None) is None:
            raise NotFoundError("Bord")
        if not g.is_bord_owner:
            raise ForbiddenError()
        return f(*args, **kwargs)

    return decorated
