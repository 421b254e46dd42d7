"""Public share-link routes. No session required."""
import json
import logging
from collections.abc import AsyncGenerator
from datetime import tzinfo
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from countdown.config import settings
from countdown.database import get_db
from countdown.deps import display_timezone, to_local
from countdown.errors import NotFoundOrForbidden
from countdown.schemas.timer import CountdownOut, PublicTimerOut
from countdown.services import timer_service
from countdown.services.ticker import CountdownTicker
from countdown.services.time_calculator import compute_remaining, utcnow
from countdown.services.timer_service import PublicTimerView

logger = logging.getLogger(__name__)
router = APIRouter()


def _load_shared(db: Session, share_id: str) -> PublicTimerView:
    view = timer_service.get_shared_timer(db, share_id)
    if view is None:
        raise NotFoundOrForbidden("Shared timer not found")
    return view


@router.get("/{share_id}", response_model=PublicTimerOut)
def get_shared_timer(
    share_id: str,
    zone: Optional[tzinfo] = Depends(display_timezone),
    db: Session = Depends(get_db),
):
    """Read-only view of a shared timer: name, date and share id only."""
    view = _load_shared(db, share_id)
    return PublicTimerOut(
        event_name=view.event_name,
        event_date=view.event_date,
        share_id=view.share_id,
        event_date_local=to_local(view.event_date, zone),
    )


@router.get("/{share_id}/countdown", response_model=CountdownOut)
def get_shared_countdown(
    share_id: str,
    zone: Optional[tzinfo] = Depends(display_timezone),
    db: Session = Depends(get_db),
):
    view = _load_shared(db, share_id)
    now = utcnow()
    return CountdownOut.build(
        event_name=view.event_name,
        event_date=view.event_date,
        remaining=compute_remaining(view.event_date, now),
        computed_at=now,
        event_date_local=to_local(view.event_date, zone),
    )


async def _countdown_events(view: PublicTimerView, ticker: CountdownTicker) -> AsyncGenerator[str, None]:
    """Format each tick as an SSE message; ``passed`` is the final one."""
    try:
        async for remaining in ticker.ticks():
            payload = CountdownOut.build(
                event_name=view.event_name,
                event_date=view.event_date,
                remaining=remaining,
                computed_at=ticker.last_checked_at,
            ).model_dump(mode="json")
            event_type = "passed" if remaining.is_past else "tick"
            yield f"event: {event_type}\ndata: {json.dumps(payload)}\n\n"
    finally:
        ticker.stop()
        logger.debug("Countdown stream for %s closed", view.share_id)


@router.get("/{share_id}/stream")
def stream_shared_countdown(share_id: str, db: Session = Depends(get_db)) -> StreamingResponse:
    """Server-Sent Events: one ``tick`` per interval until the event passes."""
    view = _load_shared(db, share_id)
    ticker = CountdownTicker(view.event_date, interval=settings.TICK_INTERVAL_SECONDS)
    return StreamingResponse(
        _countdown_events(view, ticker),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
