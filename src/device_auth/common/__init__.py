"""Shared helpers for device_auth."""

from device_auth.common.logging import (
    LoggedClass,
    get_logger,
    log_exception,
    log_with_context,
)

__all__ = [
    "LoggedClass",
    "get_logger",
    "log_exception",
    "log_with_context",
]
