"""Pydantic schemas for Timers and countdown snapshots."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, computed_field, field_validator

from countdown.config import settings
from countdown.services.time_calculator import RemainingTime, ensure_utc


class TimerCreate(BaseModel):
    event_name: Optional[str] = None
    event_date: Optional[str] = None  # ISO-8601; parsed by the service


class TimerUpdate(BaseModel):
    event_name: Optional[str] = None
    event_date: Optional[str] = None


class TimerOut(BaseModel):
    timer_id: str
    event_name: str
    event_date: datetime
    is_main_display: bool
    share_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    event_date_local: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("event_date", "created_at", "updated_at")
    @classmethod
    def normalize_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    @computed_field
    @property
    def share_url(self) -> str:
        return build_share_url(self.share_id)


class PublicTimerOut(BaseModel):
    event_name: str
    event_date: datetime
    share_id: str
    event_date_local: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("event_date")
    @classmethod
    def normalize_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class CountdownSegment(BaseModel):
    label: str
    value: int


class CountdownOut(BaseModel):
    event_name: str
    event_date: datetime
    days: int
    hours: int
    minutes: int
    seconds: int
    total_hours: int
    is_less_than_week: bool
    is_past: bool
    display_mode: str
    display: str
    segments: list[CountdownSegment]
    computed_at: datetime
    event_date_local: Optional[datetime] = None

    @classmethod
    def build(
        cls,
        event_name: str,
        event_date: datetime,
        remaining: RemainingTime,
        computed_at: datetime,
        event_date_local: Optional[datetime] = None,
    ) -> CountdownOut:
        return cls(
            event_name=event_name,
            event_date=ensure_utc(event_date),
            days=remaining.days,
            hours=remaining.hours,
            minutes=remaining.minutes,
            seconds=remaining.seconds,
            total_hours=remaining.total_hours,
            is_less_than_week=remaining.is_less_than_week,
            is_past=remaining.is_past,
            display_mode=remaining.display_mode,
            display=remaining.format(),
            segments=[CountdownSegment(label=label, value=value) for label, value in remaining.segments()],
            computed_at=computed_at,
            event_date_local=event_date_local,
        )


def build_share_url(share_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/share/{share_id}"
