# gistbot/errors.py
# Structured error types raised by the gist store and the purge job

from typing import Optional


class AppError(Exception):
    """Base application error with structured details."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """Return a standardized error payload."""
        content = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            content["details"] = self.details
        return {"error": content}


class DatabaseError(AppError):
    """Database operation failed."""
    def __init__(self, message: str = "Database operation failed", details: Optional[dict] = None):
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            details=details
        )


class ValidationError(AppError):
    """Gist fields failed validation."""
    def __init__(self, message: str = "Validation failed", details: Optional[dict] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class NotFoundError(AppError):
    """Gist not found."""
    def __init__(self, message: str = "Gist not found", details: Optional[dict] = None):
        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            details=details
        )


class ConflictError(AppError):
    """A gist with the same id already exists."""
    def __init__(self, message: str = "Gist id already exists", details: Optional[dict] = None):
        super().__init__(
            message=message,
            error_code="CONFLICT",
            details=details
        )


class ConfigurationError(AppError):
    """A setting required by the operation is missing or invalid."""
    def __init__(self, message: str = "Invalid configuration", details: Optional[dict] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details
        )
