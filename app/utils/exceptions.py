"""Exception classes shared by the services and API layer."""
from typing import Any, Optional


class AppError(Exception):
    """Base exception class for all application errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details or []
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised when input does not have the expected shape."""
    pass


class DuplicateResourceError(AppError):
    """Raised when an email or username is already taken."""
    pass


class GenerationExhaustedError(AppError):
    """Raised when a unique value could not be derived within the attempt bound."""
    pass


class UnauthorizedError(AppError):
    """Raised when credentials or a session token are missing or invalid."""
    pass


class InternalFailureError(AppError):
    """Raised on unexpected store or signing failures."""
    pass
