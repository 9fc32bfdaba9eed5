"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to and a stable machine code.
The handlers registered in app.main turn them into JSON responses:

    {"detail": "<message>", "code": "<CODE>"}
"""

import re
from typing import Optional


class PortalError(Exception):
    """Base class for all service-layer errors."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class InvalidFieldError(PortalError):
    """Caller named a status field outside the recognized six."""

    status_code = 400
    code = "INVALID_FIELD"


class NotFoundError(PortalError):
    status_code = 404
    code = "NOT_FOUND"


class ForbiddenError(PortalError):
    status_code = 403
    code = "FORBIDDEN"


class ConflictError(PortalError):
    status_code = 400
    code = "CONFLICT"


class PersistenceError(PortalError):
    """Backing store failure. Terminal, never retried."""

    status_code = 500
    code = "PERSISTENCE_ERROR"


def sanitize_db_error(error: Exception) -> str:
    """
    Reduce a driver error to its first line with SQL fragments removed.
    """
    message = str(error).split("\n")[0].strip()
    message = re.sub(r"\[SQL:.*", "", message, flags=re.IGNORECASE)
    message = re.sub(r"\b(SELECT|INSERT|UPDATE|DELETE)\b.*", "[SQL query]", message, flags=re.IGNORECASE)
    return message.strip() or "database error"


def persistence_error(error: Exception) -> PersistenceError:
    return PersistenceError(f"Database error: {sanitize_db_error(error)}", original_error=error)
