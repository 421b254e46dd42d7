"""Timer lifecycle service: owner-scoped create/list/update/delete and sharing.

Every owner-scoped operation takes the caller's ``owner_id`` explicitly and
filters on it, so a timer that belongs to someone else is reported exactly
like one that does not exist. Main-flag changes live in ``main_timer``.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from countdown.errors import NotFoundOrForbidden, ValidationError
from countdown.models.timer import Timer
from countdown.services.main_timer import select_main
from countdown.services.persistence import storage_errors
from countdown.services.time_calculator import ensure_utc, utcnow

logger = logging.getLogger(__name__)

MAX_EVENT_NAME_LENGTH = 255


@dataclass(frozen=True)
class PublicTimerView:
    """The only timer fields visible through a share link."""

    event_name: str
    event_date: datetime
    share_id: str


def parse_event_date(value: Any) -> datetime:
    """Accept a datetime or an ISO-8601 string and return an aware UTC instant."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError()
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str):
        raise ValidationError("Invalid event date")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError("Invalid event date")
    return ensure_utc(parsed)


def _clean_name(event_name: Optional[str]) -> str:
    name = (event_name or "").strip()
    if not name:
        raise ValidationError()
    if len(name) > MAX_EVENT_NAME_LENGTH:
        raise ValidationError(f"Event name must be at most {MAX_EVENT_NAME_LENGTH} characters")
    return name


def _owned_timer(db: Session, owner_id: str, timer_id: str) -> Timer:
    timer = (
        db.query(Timer)
        .filter(Timer.timer_id == timer_id, Timer.owner_id == owner_id)
        .first()
    )
    if timer is None:
        logger.warning("Timer %s not found for owner %s", timer_id, owner_id)
        raise NotFoundOrForbidden()
    return timer


def _insert_timer(db: Session, owner_id: str, name: str, when: datetime, is_main: bool) -> Timer:
    timer = Timer(
        owner_id=owner_id,
        event_name=name,
        event_date=when,
        is_main_display=is_main,
    )
    db.add(timer)
    db.commit()
    return timer


def create_timer(db: Session, owner_id: str, event_name: Optional[str], event_date: Any) -> Timer:
    """Create a timer; the owner's first timer becomes the main display."""
    name = _clean_name(event_name)
    when = parse_event_date(event_date)

    with storage_errors(db, "create timer"):
        existing = db.query(func.count(Timer.timer_id)).filter(Timer.owner_id == owner_id).scalar()
        is_first = existing == 0
        try:
            timer = _insert_timer(db, owner_id, name, when, is_main=is_first)
        except IntegrityError:
            if not is_first:
                raise
            # A concurrent create already committed this owner's main timer.
            db.rollback()
            logger.warning("Lost first-timer race for owner %s; creating as non-main", owner_id)
            timer = _insert_timer(db, owner_id, name, when, is_main=False)
        db.refresh(timer)

    logger.info(
        "Created timer '%s' (%s) for owner %s, main=%s",
        timer.event_name, timer.timer_id, owner_id, timer.is_main_display,
    )
    return timer


def list_timers(db: Session, owner_id: str) -> list[Timer]:
    """All of the owner's timers, soonest first."""
    with storage_errors(db, "list timers"):
        return (
            db.query(Timer)
            .filter(Timer.owner_id == owner_id)
            .order_by(Timer.event_date, Timer.timer_id)
            .all()
        )


def get_timer(db: Session, owner_id: str, timer_id: str) -> Timer:
    with storage_errors(db, "load timer"):
        return _owned_timer(db, owner_id, timer_id)


def get_main_timer(db: Session, owner_id: str, now: Optional[datetime] = None) -> Optional[Timer]:
    """The flagged main timer, else the soonest upcoming one, else None."""
    return select_main(list_timers(db, owner_id), now or utcnow())


def update_timer(
    db: Session,
    owner_id: str,
    timer_id: str,
    event_name: Optional[str],
    event_date: Any,
    now: Optional[datetime] = None,
) -> Timer:
    """Overwrite name and date. The main flag is left untouched."""
    name = _clean_name(event_name)
    when = parse_event_date(event_date)

    with storage_errors(db, "update timer"):
        timer = _owned_timer(db, owner_id, timer_id)
        timer.event_name = name
        timer.event_date = when
        timer.updated_at = now or utcnow()
        db.commit()
        db.refresh(timer)

    logger.info("Updated timer %s for owner %s", timer_id, owner_id)
    return timer


def delete_timer(db: Session, owner_id: str, timer_id: str) -> None:
    """Permanently delete a timer. A deleted main timer is not replaced."""
    with storage_errors(db, "delete timer"):
        timer = _owned_timer(db, owner_id, timer_id)
        was_main = timer.is_main_display
        db.delete(timer)
        db.commit()

    logger.info("Deleted timer %s for owner %s (was main: %s)", timer_id, owner_id, was_main)


def get_shared_timer(db: Session, share_id: str) -> Optional[PublicTimerView]:
    """Public lookup by share id; never exposes the owner."""
    with storage_errors(db, "load shared timer"):
        row = (
            db.query(Timer.event_name, Timer.event_date, Timer.share_id)
            .filter(Timer.share_id == share_id)
            .first()
        )
    if row is None:
        return None
    return PublicTimerView(
        event_name=row.event_name,
        event_date=ensure_utc(row.event_date),
        share_id=row.share_id,
    )
