"""Sign-up, login and logout routes."""
import logging
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from countdown.config import settings
from countdown.database import get_db
from countdown.deps import require_user
from countdown.models.user import User
from countdown.schemas.user import SignInRequest, SignUpRequest, UserOut
from countdown.services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _set_session_cookie(response: Response, user: User) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=auth_service.sign_session(user.user_id),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


@router.post("/signup", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def sign_up(payload: SignUpRequest, response: Response, db: Session = Depends(get_db)):
    """Create an account and start a session."""
    user = auth_service.sign_up(db, payload.username, payload.email, payload.password)
    _set_session_cookie(response, user)
    return user


@router.post("/login", response_model=UserOut)
def sign_in(payload: SignInRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.sign_in(db, payload.email, payload.password)
    _set_session_cookie(response, user)
    return user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(require_user)):
    return user
