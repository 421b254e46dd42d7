"""FastAPI dependencies resolving the session cookie to an owner id."""
from datetime import datetime, tzinfo
from typing import Optional

import pytz
from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from countdown.config import settings
from countdown.database import get_db
from countdown.errors import Unauthenticated, ValidationError
from countdown.models.user import User
from countdown.services import auth_service
from countdown.services.time_calculator import ensure_utc


def optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return auth_service.get_current_user(db, token)


def require_user(user: Optional[User] = Depends(optional_user)) -> User:
    if user is None:
        raise Unauthenticated()
    return user


def require_owner_id(user: User = Depends(require_user)) -> str:
    return user.user_id


def display_timezone(
    tz: Optional[str] = Query(None, description="IANA timezone for event_date_local"),
) -> Optional[tzinfo]:
    """Caller's local zone; only used to render dates on the way out."""
    if tz is None:
        return None
    try:
        return pytz.timezone(tz)
    except pytz.UnknownTimeZoneError:
        raise ValidationError(f"Unknown timezone: {tz}")


def to_local(value: datetime, zone: Optional[tzinfo]) -> Optional[datetime]:
    if zone is None:
        return None
    return ensure_utc(value).astimezone(zone)
