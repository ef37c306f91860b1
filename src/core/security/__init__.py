"""
Security utilities module.

Provides redaction of credentials before they reach logs:
    - sanitize_token(): Remove the signature from a shared access signature
    - sanitize_connection_string(): Remove the SharedAccessKey value
    - sanitize_error_message(): Remove sensitive data from error text
"""

from core.security.sanitize import (
    REDACTED,
    SENSITIVE_PATTERNS,
    sanitize_connection_string,
    sanitize_error_message,
    sanitize_token,
)

__all__ = [
    "sanitize_token",
    "sanitize_connection_string",
    "sanitize_error_message",
    "REDACTED",
    "SENSITIVE_PATTERNS",
]
