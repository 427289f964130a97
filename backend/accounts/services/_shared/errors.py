"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
code. They are the contract between repositories, adapters and services.

The translation to HTTP responses (RFC 7807) is handled by
``accounts/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - ``status_code`` is only a hint for the translation layer.
    """

    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationFailedError(ServiceError):
    """Raised when caller input is missing or malformed."""

    status_code = 400
    default_message = "All fields are required"


class AuthenticationError(ServiceError):
    """Raised when credentials or a refresh token are rejected."""

    status_code = 401
    default_message = "Unauthorized request"


class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param message: Human-readable message.
    :type message: str | None
    """

    status_code = 404
    default_message = "Resource not found"


class ConflictError(ServiceError):
    """Raised when a unique constraint or business rule conflict occurs."""

    status_code = 409
    default_message = "Resource already exists"


class InternalServiceError(ServiceError):
    """Raised when an operation fails for reasons the caller cannot fix."""

    status_code = 500
    default_message = "Something went wrong"


class TokenIssueError(InternalServiceError):
    """
    Raised when the token pair cannot be produced or persisted.

    Always raised ``from`` the underlying failure so the cause stays
    available to logging and debugging.
    """

    default_message = "Something went wrong while generating access and refresh tokens"


class TokenVerificationError(Exception):
    """Raised by token providers when a token fails verification.

    :param reason: Short reason (``"Token has expired"``, ``"Invalid token"``).
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)
