"""Log context variables propagated through contextvars."""

from contextvars import ContextVar
from typing import Dict, Optional

_domain: ContextVar[Optional[str]] = ContextVar("domain", default=None)
_stage: ContextVar[Optional[str]] = ContextVar("stage", default=None)
_device_id: ContextVar[Optional[str]] = ContextVar("device_id", default=None)


def set_log_context(
    domain: Optional[str] = None,
    stage: Optional[str] = None,
    device_id: Optional[str] = None,
) -> None:
    """Set context values. Only provided (non-None) values are updated."""
    if domain is not None:
        _domain.set(domain)
    if stage is not None:
        _stage.set(stage)
    if device_id is not None:
        _device_id.set(device_id)


def get_log_context() -> Dict[str, Optional[str]]:
    """Get current log context."""
    return {
        "domain": _domain.get(),
        "stage": _stage.get(),
        "device_id": _device_id.get(),
    }


def clear_log_context() -> None:
    """Reset all context values."""
    _domain.set(None)
    _stage.set(None)
    _device_id.set(None)
