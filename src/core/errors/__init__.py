"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- DeviceAuthError hierarchy for typed exceptions
- Classification utilities for error handling
"""

from core.errors.exceptions import (
    # Enums
    ErrorCategory,
    # Base classes
    DeviceAuthError,
    AuthError,
    PermanentError,
    # Auth errors
    SigningError,
    # Permanent errors
    ValidationError,
    ConfigurationError,
    MissingConnectionParameterError,
    ProviderDisposedError,
    # Classification utilities
    classify_exception,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "DeviceAuthError",
    "AuthError",
    "PermanentError",
    # Auth errors
    "SigningError",
    # Permanent errors
    "ValidationError",
    "ConfigurationError",
    "MissingConnectionParameterError",
    "ProviderDisposedError",
    # Classification utilities
    "classify_exception",
]
