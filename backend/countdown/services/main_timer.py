"""Main-timer selection and promotion.

A user has at most one timer flagged ``is_main_display``. Reads fall back to
the soonest upcoming timer when no flag is set; writes go through
``set_main`` only, which clears and sets the flag in one transaction.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from countdown.errors import NotFoundOrForbidden
from countdown.models.timer import Timer
from countdown.services.persistence import storage_errors
from countdown.services.time_calculator import ensure_utc, utcnow

logger = logging.getLogger(__name__)


def select_main(timers: Iterable[Timer], now: datetime) -> Optional[Timer]:
    """Pick the timer to feature: the flagged one, else the soonest upcoming."""
    timers = list(timers)
    flagged = [t for t in timers if t.is_main_display]
    if flagged:
        if len(flagged) > 1:
            logger.warning(
                "Owner %s has %d timers flagged main; using lowest id",
                flagged[0].owner_id, len(flagged),
            )
        return min(flagged, key=lambda t: t.timer_id)

    now = ensure_utc(now)
    upcoming = [t for t in timers if ensure_utc(t.event_date) > now]
    if not upcoming:
        return None
    return min(upcoming, key=lambda t: (ensure_utc(t.event_date), t.timer_id))


def _clear_other_mains(db: Session, owner_id: str, timer_id: str, now: datetime) -> int:
    """Unflag every main timer of ``owner_id`` except ``timer_id``, as stored right now."""
    return (
        db.query(Timer)
        .filter(
            Timer.owner_id == owner_id,
            Timer.timer_id != timer_id,
            Timer.is_main_display.is_(True),
        )
        .update({"is_main_display": False, "updated_at": now}, synchronize_session="fetch")
    )


def set_main(db: Session, owner_id: str, timer_id: str, now: Optional[datetime] = None) -> Timer:
    """Make ``timer_id`` the owner's only main timer."""
    now = now or utcnow()
    with storage_errors(db, "set main timer"):
        # Row locks serialize concurrent promotions for the same owner (no-op on SQLite).
        owned = (
            db.query(Timer)
            .filter(Timer.owner_id == owner_id)
            .order_by(Timer.timer_id)
            .with_for_update()
            .all()
        )
        target = next((t for t in owned if t.timer_id == timer_id), None)
        if target is None:
            logger.warning("Owner %s tried to set main on unknown timer %s", owner_id, timer_id)
            raise NotFoundOrForbidden()

        # Both updates match on stored flags, not the rows loaded above.
        # Clear runs first so the partial unique index never sees two mains.
        cleared = _clear_other_mains(db, owner_id, timer_id, now)
        (
            db.query(Timer)
            .filter(Timer.timer_id == timer_id, Timer.is_main_display.is_(False))
            .update({"is_main_display": True, "updated_at": now}, synchronize_session="fetch")
        )
        db.commit()
        db.refresh(target)
    logger.info(
        "Timer %s is now the main display for owner %s (%d demoted)", timer_id, owner_id, cleared,
    )
    return target
