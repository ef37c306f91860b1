"""
Shared access key authentication provider.

Creates shared access signature tokens from a device's shared access key,
renews them on a regular cadence, and emits ``newTokenAvailable`` so
transports can re-authenticate with the hub without dropping the session.

Timing:
    Every token is valid for ``token_valid_time_seconds`` (default 1 hour).
    A renewal is scheduled ``token_valid_time_seconds -
    token_renewal_margin_seconds`` after each renewal (default 45 minutes).
    A read that finds less than ``token_renewal_margin_seconds`` remaining
    renews immediately, whichever comes first.

Usage:
    provider = SharedAccessKeyAuthenticationProvider.from_connection_string(cs)
    provider.on(NEW_TOKEN_AVAILABLE, transport.update_credentials)
    credentials = provider.get_device_credentials()
    ...
    provider.dispose()
"""

import functools
import logging
import math
import threading
import time
from enum import Enum
from typing import Any, Callable, Optional

from core.errors import (
    ConfigurationError,
    ProviderDisposedError,
    classify_exception,
)
from device_auth import metrics
from device_auth.common.logging import LoggedClass
from device_auth.connection_string import DEVICE_REQUIRED_FIELDS, ConnectionString
from device_auth.credentials import AuthenticationType, TransportConfig
from device_auth.events import ERROR, NEW_TOKEN_AVAILABLE, EventEmitter
from device_auth.scheduler import Scheduler, ThreadingScheduler, TimerHandle
from device_auth.signature import encode_uri_component_strict, sign

DEFAULT_TOKEN_VALID_TIME_SECONDS = 3600  # 1 hour
DEFAULT_TOKEN_RENEWAL_MARGIN_SECONDS = 900  # 15 minutes

TRIGGER_INITIAL = "initial"
TRIGGER_TIMER = "timer"
TRIGGER_STALE_READ = "stale_read"

Signer = Callable[[str, Optional[str], str, int], str]
CredentialsCallback = Callable[[Optional[BaseException], Optional[TransportConfig]], Any]


class TokenState(Enum):
    """Validity of the token currently held by a provider."""

    UNISSUED = "unissued"
    VALID = "valid"
    STALE_WINDOW = "stale_window"
    DISPOSED = "disposed"


def _validate_seconds(name: str, value: Optional[int], default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(
            f"{name} must be a positive integer, got {value!r}",
            context={"parameter": name},
        )
    return value


class SharedAccessKeyAuthenticationProvider(LoggedClass, EventEmitter):
    """
    Token authentication provider backed by a shared access key.

    Thread-safe: the renewal timer fires on its own thread, so reads, renewals
    and disposal are serialized with a re-entrant lock. Listeners run while the
    lock is held and may call get_device_credentials() re-entrantly.
    """

    type = AuthenticationType.TOKEN

    def __init__(
        self,
        credentials: TransportConfig,
        token_valid_time_seconds: Optional[int] = None,
        token_renewal_margin_seconds: Optional[int] = None,
        *,
        signer: Optional[Signer] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            credentials: Device identity and shared access key
            token_valid_time_seconds: Lifetime of each token (default 3600)
            token_renewal_margin_seconds: How long before expiry a token is
                renewed (default 900)
            signer: sign(resource_uri, key_name, key, expiry) -> token
            scheduler: Timer facility (default: threading timers)
            clock: Returns seconds since the epoch (default: time.time)

        Raises:
            ConfigurationError: If the renewal margin is not strictly less
                than the validity period
        """
        super().__init__()

        valid = _validate_seconds(
            "token_valid_time_seconds",
            token_valid_time_seconds,
            DEFAULT_TOKEN_VALID_TIME_SECONDS,
        )
        margin = _validate_seconds(
            "token_renewal_margin_seconds",
            token_renewal_margin_seconds,
            DEFAULT_TOKEN_RENEWAL_MARGIN_SECONDS,
        )
        if valid <= margin:
            raise ConfigurationError(
                "token_renewal_margin_seconds must be less than token_valid_time_seconds",
                context={
                    "token_valid_time_seconds": valid,
                    "token_renewal_margin_seconds": margin,
                },
            )

        self._credentials = credentials
        self._token_valid_time_seconds = valid
        self._token_renewal_margin_seconds = margin

        self._signer: Signer = signer or sign
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._clock = clock or time.time

        self._current_token_expiry_time_seconds: Optional[int] = None
        self._renewal_timer: Optional[TimerHandle] = None
        self._renewal_generation = 0
        self._disposed = False
        self._lock = threading.RLock()

        self._log(
            logging.DEBUG,
            "Authentication provider created",
            token_valid_time_seconds=valid,
            token_renewal_margin_seconds=margin,
        )

        with self._lock:
            self._renew_token(TRIGGER_INITIAL)
        metrics.active_providers.inc()

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_connection_string(
        cls,
        connection_string: str,
        token_valid_time_seconds: Optional[int] = None,
        token_renewal_margin_seconds: Optional[int] = None,
        **collaborators: Any,
    ) -> "SharedAccessKeyAuthenticationProvider":
        """
        Create a provider from a device connection string.

        Args:
            connection_string: Must contain HostName, DeviceId and SharedAccessKey
            token_valid_time_seconds: Lifetime of each token
            token_renewal_margin_seconds: Renewal margin before expiry
            **collaborators: signer, scheduler and clock overrides

        Raises:
            ConfigurationError: If connection_string is empty
            MissingConnectionParameterError: If a required field is absent
        """
        cs = ConnectionString.parse(connection_string, DEVICE_REQUIRED_FIELDS)

        credentials = TransportConfig(
            host=cs.host_name,
            device_id=cs.device_id,
            shared_access_key_name=cs.shared_access_key_name or None,
            shared_access_key=cs.shared_access_key,
        )

        return cls(
            credentials,
            token_valid_time_seconds,
            token_renewal_margin_seconds,
            **collaborators,
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def device_id(self) -> str:
        return self._credentials.device_id

    @property
    def host(self) -> str:
        return self._credentials.host

    @property
    def token_valid_time_seconds(self) -> int:
        return self._token_valid_time_seconds

    @property
    def token_renewal_margin_seconds(self) -> int:
        return self._token_renewal_margin_seconds

    @property
    def current_token_expiry_time_seconds(self) -> Optional[int]:
        return self._current_token_expiry_time_seconds

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> TokenState:
        with self._lock:
            if self._disposed:
                return TokenState.DISPOSED
            if self._current_token_expiry_time_seconds is None:
                return TokenState.UNISSUED
            if self._should_renew_token():
                return TokenState.STALE_WINDOW
            return TokenState.VALID

    # ------------------------------------------------------------------
    # Credential access
    # ------------------------------------------------------------------

    def get_device_credentials(
        self, callback: Optional[CredentialsCallback] = None
    ) -> Optional[TransportConfig]:
        """
        Get the current credentials, renewing first if the token is stale.

        With a callback, it is called exactly once with (None, credentials)
        or (error, None) and errors are not raised. Without one, errors raise.

        Args:
            callback: Optional callback(error, credentials)

        Returns:
            The credential snapshot, or None when an error went to the callback

        Raises:
            ProviderDisposedError: If the provider was disposed (no callback)
            Exception: Whatever the signer raised during a stale-read renewal
                (no callback)
        """
        try:
            with self._lock:
                self._ensure_active()
                if self._should_renew_token():
                    self._renew_token(TRIGGER_STALE_READ)
                credentials = self._credentials
        except Exception as e:
            if callback is None:
                raise
            callback(e, None)
            return None

        if callback is not None:
            callback(None, credentials)
        return credentials

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        """Cancel the pending renewal and drop all listeners. Idempotent."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._cancel_renewal_timer()
            self._renewal_generation += 1
            self.remove_all_listeners()
        metrics.active_providers.dec()
        self._log(logging.INFO, "Authentication provider disposed")

    def __enter__(self) -> "SharedAccessKeyAuthenticationProvider":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Renewal
    # ------------------------------------------------------------------

    def _now(self) -> int:
        return math.floor(self._clock())

    def _ensure_active(self) -> None:
        if self._disposed:
            raise ProviderDisposedError(
                "Authentication provider has been disposed",
                context={"device_id": self.device_id},
            )

    def _should_renew_token(self) -> bool:
        if self._current_token_expiry_time_seconds is None:
            return True
        seconds_remaining = self._current_token_expiry_time_seconds - self._now()
        return seconds_remaining < self._token_renewal_margin_seconds

    def _cancel_renewal_timer(self) -> None:
        if self._renewal_timer is not None:
            self._renewal_timer.cancel()
            self._renewal_timer = None

    def _renew_token(self, trigger: str) -> None:
        """Sign a new token, reschedule, and notify. Caller holds the lock."""
        self._cancel_renewal_timer()

        new_expiry = self._now() + self._token_valid_time_seconds
        resource_uri = encode_uri_component_strict(self._credentials.resource_path)

        try:
            token = self._signer(
                resource_uri,
                self._credentials.shared_access_key_name,
                self._credentials.shared_access_key,
                new_expiry,
            )
        except Exception as e:
            metrics.record_renewal_error(trigger, classify_exception(e).value)
            raise

        self._credentials = self._credentials.with_signature(token)
        self._current_token_expiry_time_seconds = new_expiry

        self._renewal_generation += 1
        next_renewal = self._token_valid_time_seconds - self._token_renewal_margin_seconds
        self._renewal_timer = self._scheduler.call_later(
            next_renewal,
            functools.partial(self._on_renewal_timer, self._renewal_generation),
        )

        metrics.record_renewal(trigger, self.device_id, new_expiry)
        self._log(
            logging.INFO,
            "Token renewed",
            trigger=trigger,
            expiry=new_expiry,
            renewal_in_seconds=next_renewal,
        )

        self.emit(NEW_TOKEN_AVAILABLE, self._credentials)

    def _on_renewal_timer(self, generation: int) -> None:
        """Timer callback. Errors go to the 'error' event since there is no caller."""
        with self._lock:
            # Disposed, or superseded by a stale-read renewal while waiting
            if self._disposed or generation != self._renewal_generation:
                return
            self._renewal_timer = None
            try:
                self._renew_token(TRIGGER_TIMER)
            except Exception as e:
                self._log_exception(e, "Scheduled token renewal failed", trigger=TRIGGER_TIMER)
                self.emit(ERROR, e)
