"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    IDENTITY_NOT_FOUND = "IDENTITY_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Upload errors (413 / 415)
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"

    # Conflict errors (409)
    PROFILE_EXISTS = "PROFILE_EXISTS"
    SLUG_TAKEN = "SLUG_TAKEN"
    INVALID_STATE = "INVALID_STATE"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Upstream errors (503)
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class ProfileNotFoundError(AppException):
    """Profile not found by owner id or slug."""

    def __init__(self, key: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {key}",
            status_code=404,
            details={"key": key},
        )


class IdentityNotFoundError(AppException):
    """The identity provider has no user with this id."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.IDENTITY_NOT_FOUND,
            message=f"Identity provider user not found: {user_id}",
            status_code=404,
            details={"user_id": user_id},
        )


class ProfileAlreadyExistsError(AppException):
    """The owner already has a profile."""

    def __init__(self, owner_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_EXISTS,
            message=f"Profile already exists: {owner_id}",
            status_code=409,
            details={"owner_id": owner_id},
        )


class SlugTakenError(AppException):
    """Shareable slug is already used by another profile."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            error_code=ErrorCode.SLUG_TAKEN,
            message=f"Shareable slug already taken: {slug}",
            status_code=409,
            details={"slug": slug},
        )


class InvalidStateError(AppException):
    """A cross-field invariant would be violated."""

    def __init__(self, message: str, fields: list[str]) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_STATE,
            message=message,
            status_code=409,
            details={"fields": fields},
        )


class ProfileValidationError(AppException):
    """One or more patch fields are malformed.

    ``errors`` is a list of ``{"field": ..., "message": ...}`` entries.
    """

    def __init__(self, errors: list[dict[str, str]]) -> None:
        fields = ", ".join(error["field"] for error in errors)
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=f"Invalid profile fields: {fields}",
            status_code=400,
            details=errors,
        )


class UploadRejectedError(AppException):
    """Uploaded file violates the size or media type limits."""

    def __init__(self, error_code: ErrorCode, message: str, status_code: int) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=status_code,
        )


class UpstreamUnavailableError(AppException):
    """Identity provider or upload storage failed; safe to retry."""

    def __init__(self, service: str, message: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.UPSTREAM_UNAVAILABLE,
            message=message or f"{service} is unavailable, try again later",
            status_code=503,
            details={"service": service, "retryable": True},
        )
