"""Domain errors raised by the service layer.

Services never raise framework types; ``countdown.main`` turns every
``CountdownError`` into a JSON ``{"error": ..., "code": ...}`` response.
"""
from typing import Optional


class CountdownError(Exception):
    """Base class for every error the service layer reports to callers."""

    code = "error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CountdownError):
    code = "validation_error"
    status_code = 422
    default_message = "Event name and date are required"


class NotFoundOrForbidden(CountdownError):
    """Timer is unknown or owned by someone else; the two are indistinguishable."""

    code = "not_found"
    status_code = 404
    default_message = "Timer not found"


class Unauthenticated(CountdownError):
    code = "unauthenticated"
    status_code = 401
    default_message = "You must be logged in"


class Conflict(CountdownError):
    code = "conflict"
    status_code = 409
    default_message = "Resource already exists"


class StorageError(CountdownError):
    code = "storage_error"
    status_code = 503
    default_message = "The timer store is unavailable, please try again"
