"""
Exception types and error classification for device authentication.

Provides:
- ErrorCategory enum for handling decisions
- Typed exception hierarchy for provider errors
- Error classification utilities
"""

from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed if attempted again
        AUTH: Failures producing or using credentials (e.g., signing failed)
        PERMANENT: Failures that won't change without operator action
                   (e.g., invalid configuration, missing connection fields)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class DeviceAuthError(Exception):
    """
    Base exception for all device authentication errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for handling decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthError(DeviceAuthError):
    """Base class for authentication errors."""

    category = ErrorCategory.AUTH


class SigningError(AuthError):
    """Shared access signature could not be computed."""

    pass


# =============================================================================
# Permanent Errors
# =============================================================================


class PermanentError(DeviceAuthError):
    """Base class for non-retriable errors."""

    category = ErrorCategory.PERMANENT


class ValidationError(PermanentError):
    """Data validation failed."""

    pass


class ConfigurationError(PermanentError):
    """Invalid configuration."""

    pass


class MissingConnectionParameterError(ConfigurationError):
    """A required field is absent from the connection string."""

    def __init__(
        self,
        parameter: str,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        message = f"The connection string is missing the property: {parameter}"
        super().__init__(message, cause, {"parameter": parameter, **(context or {})})
        self.parameter = parameter


class ProviderDisposedError(PermanentError):
    """Operation attempted on a disposed authentication provider."""

    pass


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_exception(exc: Exception) -> ErrorCategory:
    """
    Classify an exception into error category.

    Args:
        exc: Exception to classify

    Returns:
        Appropriate ErrorCategory
    """
    # Already classified
    if isinstance(exc, DeviceAuthError):
        return exc.category

    exc_type = type(exc).__name__.lower()
    exc_str = str(exc).lower()

    if "timeout" in exc_type or "timeout" in exc_str:
        return ErrorCategory.TRANSIENT

    if isinstance(exc, (ConnectionError, OSError)):
        return ErrorCategory.TRANSIENT

    auth_markers = (
        "unauthorized",
        "authentication",
        "signature",
        "invalid token",
        "token expired",
    )
    if any(m in exc_str for m in auth_markers):
        return ErrorCategory.AUTH

    if isinstance(exc, (TypeError, ValueError)):
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN

