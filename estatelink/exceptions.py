"""
Error taxonomy shared by services and controllers.
Every error carries the HTTP status it maps to at the boundary.
"""
from typing import Any, Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, error: Any = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateError(AppError):
    status_code = 400
    default_message = "Username or email already exists"


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid username or password"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class NotPending(AppError):
    status_code = 400
    default_message = "Cannot delete property that is not pending"


class NoFieldsToUpdate(AppError):
    status_code = 400
    default_message = "No fields to update"


class StoreError(AppError):
    status_code = 500
    default_message = "Database operation failed"


# SQLSTATE codes of the integrity_constraint_violation class
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"


class IntegrityConflict(StoreError):
    """Raised when the store itself rejects a write on a constraint"""

    def __init__(
        self,
        message: Optional[str] = None,
        error: Any = None,
        constraint: Optional[str] = None,
        sqlstate: Optional[str] = None,
        column: Optional[str] = None,
    ):
        super().__init__(message, error)
        self.constraint = constraint
        self.sqlstate = sqlstate
        self.column = column


class SchemaBootstrapError(StoreError):
    default_message = "Failed to create database tables"
