"""
Device authentication with shared access keys.

Derives shared access signature tokens from a device's shared access key,
renews them before they expire, and notifies transports when a new token is
available.

Components:
    - SharedAccessKeyAuthenticationProvider: token renewal engine
    - TransportConfig: immutable credential snapshot
    - ConnectionString: connection string parser
    - SharedAccessSignature: token construction and parsing
    - EventEmitter: newTokenAvailable / error notifications
"""

from device_auth.connection_string import ConnectionString
from device_auth.credentials import AuthenticationType, TransportConfig
from device_auth.events import ERROR, NEW_TOKEN_AVAILABLE, EventEmitter
from device_auth.provider import (
    DEFAULT_TOKEN_RENEWAL_MARGIN_SECONDS,
    DEFAULT_TOKEN_VALID_TIME_SECONDS,
    SharedAccessKeyAuthenticationProvider,
    TokenState,
)
from device_auth.scheduler import AsyncioScheduler, ThreadingScheduler
from device_auth.signature import SharedAccessSignature, encode_uri_component_strict, sign

__all__ = [
    "SharedAccessKeyAuthenticationProvider",
    "TokenState",
    "DEFAULT_TOKEN_VALID_TIME_SECONDS",
    "DEFAULT_TOKEN_RENEWAL_MARGIN_SECONDS",
    "TransportConfig",
    "AuthenticationType",
    "ConnectionString",
    "SharedAccessSignature",
    "encode_uri_component_strict",
    "sign",
    "EventEmitter",
    "NEW_TOKEN_AVAILABLE",
    "ERROR",
    "ThreadingScheduler",
    "AsyncioScheduler",
]
