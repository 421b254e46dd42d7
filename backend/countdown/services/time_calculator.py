"""Countdown arithmetic.

``compute_remaining`` is a pure function of two instants. Display follows two
modes: under a week the countdown is shown as total hours, minutes and
seconds (``167:59:59``); from seven days on it is shown as days, hours and
minutes (``30d 00h 00m``).
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

MS_PER_SECOND = 1_000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR
WEEK_THRESHOLD_DAYS = 7

PAST_MESSAGE = "Event has passed"


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RemainingTime:
    days: int
    hours: int
    minutes: int
    seconds: int
    total_hours: int
    is_less_than_week: bool
    is_past: bool

    @property
    def display_mode(self) -> str:
        if self.is_past:
            return "past"
        return "hms" if self.is_less_than_week else "dhm"

    def segments(self) -> list[tuple[str, int]]:
        """Labelled counters for the active display mode."""
        if self.is_past:
            return []
        if self.is_less_than_week:
            return [("HOURS", self.total_hours), ("MINUTES", self.minutes), ("SECONDS", self.seconds)]
        return [("DAYS", self.days), ("HOURS", self.hours), ("MINUTES", self.minutes)]

    def format(self) -> str:
        if self.is_past:
            return PAST_MESSAGE
        if self.is_less_than_week:
            return f"{self.total_hours:02d}:{self.minutes:02d}:{self.seconds:02d}"
        return f"{self.days}d {self.hours:02d}h {self.minutes:02d}m"


PAST = RemainingTime(
    days=0,
    hours=0,
    minutes=0,
    seconds=0,
    total_hours=0,
    is_less_than_week=True,
    is_past=True,
)


def compute_remaining(target: datetime, now: datetime) -> RemainingTime:
    """Break the time left until ``target`` into display counters."""
    diff = (ensure_utc(target) - ensure_utc(now)) // timedelta(milliseconds=1)
    if diff <= 0:
        return PAST

    days = diff // MS_PER_DAY
    return RemainingTime(
        days=days,
        hours=(diff // MS_PER_HOUR) % 24,
        minutes=(diff // MS_PER_MINUTE) % 60,
        seconds=(diff // MS_PER_SECOND) % 60,
        total_hours=diff // MS_PER_HOUR,
        # Evaluated on whole days: 6d 23h is under a week, 7d 0h is not.
        is_less_than_week=days < WEEK_THRESHOLD_DAYS,
        is_past=False,
    )
