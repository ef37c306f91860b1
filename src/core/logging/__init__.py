"""
Structured logging module.

Provides JSON file logging, console logging and context propagation.

Components:
    - JSONFormatter / ConsoleFormatter: credential-redacting formatters
    - set_log_context / get_log_context: contextvars-based log context
    - setup_logging: console + rotating file handlers
"""

from core.logging.context import clear_log_context, get_log_context, set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter
from core.logging.setup import get_log_file_path, setup_logging

__all__ = [
    "setup_logging",
    "get_log_file_path",
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    "JSONFormatter",
    "ConsoleFormatter",
]
