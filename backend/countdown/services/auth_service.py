"""Accounts and cookie sessions.

Passwords are stored as salted PBKDF2-SHA256 hashes. The session cookie holds
the user id plus an HMAC signature, so a tampered cookie simply reads as
"not logged in".
"""
import hashlib
import hmac
import logging
import secrets
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from countdown.config import settings
from countdown.errors import Conflict, Unauthenticated, ValidationError
from countdown.models.user import User
from countdown.services.persistence import storage_errors

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 260_000
_HASH_SCHEME = "pbkdf2_sha256"


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{_HASH_SCHEME}${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        scheme, iterations, salt, expected = stored.split("$")
    except ValueError:
        return False
    if scheme != _HASH_SCHEME:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def _signature(user_id: str) -> str:
    return hmac.new(settings.SECRET_KEY.encode(), user_id.encode(), hashlib.sha256).hexdigest()


def sign_session(user_id: str) -> str:
    """Cookie value for a logged-in user."""
    return f"{user_id}.{_signature(user_id)}"


def unsign_session(token: Optional[str]) -> Optional[str]:
    """User id carried by a session cookie, or None if missing or tampered."""
    if not token or "." not in token:
        return None
    user_id, _, signature = token.rpartition(".")
    if not user_id or not hmac.compare_digest(signature, _signature(user_id)):
        return None
    return user_id


def sign_up(db: Session, username: Optional[str], email: Optional[str], password: Optional[str]) -> User:
    """Register a new account. Emails are unique, compared case-insensitively."""
    username = (username or "").strip()
    email = (email or "").strip().lower()
    if not username or not email or not password:
        raise ValidationError("All fields are required")

    with storage_errors(db, "sign up"):
        if db.query(User).filter(User.email == email).first():
            raise Conflict("Email already in use")
        user = User(username=username, email=email, password_hash=hash_password(password))
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Email already in use")
        db.refresh(user)

    logger.info("Created user %s (%s)", user.user_id, user.username)
    return user


def sign_in(db: Session, email: Optional[str], password: Optional[str]) -> User:
    email = (email or "").strip().lower()
    if not email or not password:
        raise ValidationError("Email and password are required")

    with storage_errors(db, "sign in"):
        user = db.query(User).filter(User.email == email).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise Unauthenticated("Invalid email or password")

    logger.info("User %s logged in", user.user_id)
    return user


def get_current_user(db: Session, token: Optional[str]) -> Optional[User]:
    """Resolve a session cookie to an existing user."""
    user_id = unsign_session(token)
    if user_id is None:
        return None
    with storage_errors(db, "load session user"):
        return db.query(User).filter(User.user_id == user_id).first()
