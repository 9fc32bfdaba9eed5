"""
Unit tests for the service-layer error model.
"""

from sqlalchemy.exc import OperationalError

from app.core.exceptions import (
    ConflictError, ForbiddenError, InvalidFieldError, NotFoundError,
    PersistenceError, PortalError, persistence_error, sanitize_db_error
)


class TestPortalErrors:

    def test_status_codes(self):
        assert InvalidFieldError("x").status_code == 400
        assert NotFoundError("x").status_code == 404
        assert ForbiddenError("x").status_code == 403
        assert ConflictError("x").status_code == 400
        assert PersistenceError("x").status_code == 500

    def test_all_are_portal_errors(self):
        for cls in (InvalidFieldError, NotFoundError, ForbiddenError, ConflictError, PersistenceError):
            assert issubclass(cls, PortalError)

    def test_to_dict(self):
        assert NotFoundError("Application 9 not found").to_dict() == {
            "detail": "Application 9 not found",
            "code": "NOT_FOUND",
        }


class TestSanitize:

    def test_strips_sql_and_keeps_first_line(self):
        error = OperationalError("UPDATE applications SET x = 1", {}, Exception("database is locked"))
        message = sanitize_db_error(error)
        assert "database is locked" in message
        assert "UPDATE applications" not in message
        assert "\n" not in message

    def test_persistence_error_wraps_original(self):
        original = OperationalError("SELECT 1", {}, Exception("connection refused"))
        error = persistence_error(original)
        assert isinstance(error, PersistenceError)
        assert error.original_error is original
        assert error.message.startswith("Database error:")
