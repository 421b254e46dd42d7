"""Transaction helpers shared by the timer services."""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from countdown.errors import StorageError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(db: Session, action: str):
    """Roll back and surface any SQLAlchemy failure as an opaque StorageError.

    Domain errors raised inside the block also roll the session back but
    propagate unchanged.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Storage failure while trying to %s: %s", action, exc)
        raise StorageError() from exc
    except Exception:
        db.rollback()
        raise
