"""Owner-scoped timer routes: delegate to timer_service / main_timer."""
import logging
from datetime import tzinfo
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from countdown.database import get_db
from countdown.deps import display_timezone, require_owner_id, to_local
from countdown.models.timer import Timer
from countdown.schemas.timer import CountdownOut, TimerCreate, TimerOut, TimerUpdate
from countdown.services import main_timer, timer_service
from countdown.services.time_calculator import compute_remaining, utcnow

logger = logging.getLogger(__name__)
router = APIRouter()


def _timer_out(timer: Timer, zone: Optional[tzinfo] = None) -> TimerOut:
    out = TimerOut.model_validate(timer)
    out.event_date_local = to_local(out.event_date, zone)
    return out


@router.post("/", response_model=TimerOut, status_code=status.HTTP_201_CREATED)
def create_timer(
    payload: TimerCreate,
    owner_id: str = Depends(require_owner_id),
    db: Session = Depends(get_db),
):
    """Create a timer. The first timer an owner creates becomes the main display."""
    timer = timer_service.create_timer(db, owner_id, payload.event_name, payload.event_date)
    return _timer_out(timer)


@router.get("/", response_model=list[TimerOut])
def list_timers(
    owner_id: str = Depends(require_owner_id),
    zone: Optional[tzinfo] = Depends(display_timezone),
    db: Session = Depends(get_db),
):
    """List the caller's timers, soonest first."""
    return [_timer_out(t, zone) for t in timer_service.list_timers(db, owner_id)]


@router.get("/main", response_model=Optional[TimerOut])
def get_main_timer(
    owner_id: str = Depends(require_owner_id),
    zone: Optional[tzinfo] = Depends(display_timezone),
    db: Session = Depends(get_db),
):
    """The flagged main timer, else the soonest upcoming one, else null."""
    timer = timer_service.get_main_timer(db, owner_id)
    return _timer_out(timer, zone) if timer else None


@router.get("/{timer_id}", response_model=TimerOut)
def get_timer(
    timer_id: str,
    owner_id: str = Depends(require_owner_id),
    zone: Optional[tzinfo] = Depends(display_timezone),
    db: Session = Depends(get_db),
):
    return _timer_out(timer_service.get_timer(db, owner_id, timer_id), zone)


@router.put("/{timer_id}", response_model=TimerOut)
def update_timer(
    timer_id: str,
    payload: TimerUpdate,
    owner_id: str = Depends(require_owner_id),
    db: Session = Depends(get_db),
):
    """Rename or reschedule a timer (owner only)."""
    timer = timer_service.update_timer(db, owner_id, timer_id, payload.event_name, payload.event_date)
    return _timer_out(timer)


@router.delete("/{timer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_timer(
    timer_id: str,
    owner_id: str = Depends(require_owner_id),
    db: Session = Depends(get_db),
):
    timer_service.delete_timer(db, owner_id, timer_id)


@router.post("/{timer_id}/main", response_model=TimerOut)
def set_main_timer(
    timer_id: str,
    owner_id: str = Depends(require_owner_id),
    db: Session = Depends(get_db),
):
    """Make this timer the caller's main display, demoting any other."""
    return _timer_out(main_timer.set_main(db, owner_id, timer_id))


@router.get("/{timer_id}/countdown", response_model=CountdownOut)
def get_countdown(
    timer_id: str,
    owner_id: str = Depends(require_owner_id),
    zone: Optional[tzinfo] = Depends(display_timezone),
    db: Session = Depends(get_db),
):
    timer = timer_service.get_timer(db, owner_id, timer_id)
    now = utcnow()
    return CountdownOut.build(
        event_name=timer.event_name,
        event_date=timer.event_date,
        remaining=compute_remaining(timer.event_date, now),
        computed_at=now,
        event_date_local=to_local(timer.event_date, zone),
    )
