"""Change tracker — per-bord counter of unpublished owner mutations.

The counter is advisory: it drives the "N unpublished changes" badge and
nothing else. Publish resets it to zero instead of decrementing, so a
drifted count heals on the next publish.

Functions flush but do NOT commit — the caller commits.
"""

import logging

from sqlalchemy.exc import IntegrityError

from taskbord.extensions import db
from taskbord.models.publish import ChangeTracker
from taskbord.utils import utcnow

logger = logging.getLogger(__name__)


def _bump(bord_id, now):
    """Increment the counter in SQL; returns the number of rows hit."""
    return (
        ChangeTracker.query
        .filter_by(bord_id=bord_id)
        .update(
            {
                ChangeTracker.change_count: ChangeTracker.change_count + 1,
                ChangeTracker.last_modified_at: now,
            },
            synchronize_session=False,
        )
    )


def record_change(bord_id):
    """Increment the bord's counter, creating the row on first use.

    Two first changes can race to create the row. The loser's insert is
    rolled back to a savepoint and it bumps the winner's row instead, so
    the owner's write itself never fails on the counter.
    """
    now = utcnow()
    if not _bump(bord_id, now):
        try:
            with db.session.begin_nested():
                db.session.add(ChangeTracker(
                    bord_id=bord_id,
                    change_count=1,
                    last_modified_at=now,
                ))
        except IntegrityError:
            logger.warning(f"Change tracker for bord {bord_id} created concurrently; retrying bump")
            _bump(bord_id, now)
    db.session.flush()


def reset(bord_id, now=None):
    """Zero the counter after a publish."""
    now = now or utcnow()
    tracker = ChangeTracker.query.filter_by(bord_id=bord_id).first()
    if tracker is None:
        tracker = ChangeTracker(bord_id=bord_id)
        db.session.add(tracker)
    tracker.change_count = 0
    tracker.last_modified_at = now
    db.session.flush()
    return tracker


def summary(bord_id):
    """Return {changeCount, lastModifiedAt} for the UI badge."""
    tracker = ChangeTracker.query.filter_by(bord_id=bord_id).first()
    if tracker is None:
        return {"changeCount": 0, "lastModifiedAt": None}
    db.session.refresh(tracker)
    return tracker.to_dict()
