"""
Secret redaction for logs and error messages.

Provides:
- Shared access signature redaction
- Connection string redaction
- Error message sanitization
"""

import re

REDACTED = "[REDACTED]"

# ---------------------------------------------------------------------------
# Token and connection string redaction
# ---------------------------------------------------------------------------

_SIG_PATTERN = re.compile(r"(sig=)[^&\s\"']+", re.IGNORECASE)
_CONNECTION_KEY_PATTERN = re.compile(r"(SharedAccessKey=)[^;\s\"']+", re.IGNORECASE)


def sanitize_token(token: str) -> str:
    """
    Redact the signature component of a shared access signature.

    The resource, expiry and key name stay visible for debugging.

    Args:
        token: Serialized shared access signature

    Returns:
        Token with the sig value replaced with [REDACTED]
    """
    if not token:
        return token
    return _SIG_PATTERN.sub(rf"\g<1>{REDACTED}", token)


def sanitize_connection_string(connection_string: str) -> str:
    """
    Redact the SharedAccessKey value of a connection string.

    Args:
        connection_string: Device connection string

    Returns:
        Connection string with the key replaced with [REDACTED]
    """
    if not connection_string:
        return connection_string
    return _CONNECTION_KEY_PATTERN.sub(rf"\g<1>{REDACTED}", connection_string)


# ---------------------------------------------------------------------------
# Error Message Sanitization
# ---------------------------------------------------------------------------

# Patterns that may contain sensitive data in error messages
SENSITIVE_PATTERNS = [
    (_SIG_PATTERN, rf"\g<1>{REDACTED}"),
    (_CONNECTION_KEY_PATTERN, rf"\g<1>{REDACTED}"),
    (re.compile(r'(?<![A-Za-z])key=(?!\[)[^&;\s"\']+', re.IGNORECASE), f"key={REDACTED}"),
    (re.compile(r'token=(?!\[)[^&;\s"\']+', re.IGNORECASE), f"token={REDACTED}"),
    (re.compile(r'password=(?!\[)[^&;\s"\']+', re.IGNORECASE), f"password={REDACTED}"),
    (re.compile(r'secret=(?!\[)[^&;\s"\']+', re.IGNORECASE), f"secret={REDACTED}"),
    (re.compile(r"bearer\s+[a-zA-Z0-9\-_.]+", re.IGNORECASE), f"bearer {REDACTED}"),
]


def sanitize_error_message(msg: str, max_length: int = 500) -> str:
    """
    Remove potentially sensitive data from error messages.

    Applies pattern-based redaction and truncates to max_length.

    Args:
        msg: Error message that may contain sensitive data
        max_length: Maximum length of returned message

    Returns:
        Sanitized and truncated error message
    """
    if not msg:
        return msg

    for pattern, replacement in SENSITIVE_PATTERNS:
        msg = pattern.sub(replacement, msg)

    if len(msg) > max_length:
        msg = msg[: max_length - 3] + "..."

    return msg
