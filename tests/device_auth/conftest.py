"""
Pytest fixtures for device_auth tests.

Provides fixtures for:
- A manual clock
- A scheduler whose timers are fired by the test
- A signer that records its calls
- Provider construction with automatic disposal
"""

from typing import Callable, List, Optional, Tuple

import pytest

from device_auth.credentials import TransportConfig
from device_auth.provider import SharedAccessKeyAuthenticationProvider
from device_auth.signature import sign

START_TIME = 1_700_000_000.25
DEVICE_KEY = "c2VjcmV0LWRldmljZS1rZXk="  # base64("secret-device-key")
HOST = "myhub.azure-devices.net"
DEVICE_ID = "sensor-01"
CONNECTION_STRING = f"HostName={HOST};DeviceId={DEVICE_ID};SharedAccessKey={DEVICE_KEY}"


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class RecordingScheduler:
    """Scheduler that records timers; tests fire them explicitly."""

    def __init__(self):
        self.timers: List[FakeTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire(self, timer: Optional[FakeTimer] = None) -> None:
        """Fire the given timer, or the single pending one."""
        if timer is None:
            pending = self.pending
            assert len(pending) == 1, f"expected one pending timer, found {len(pending)}"
            timer = pending[0]
        timer.fired = True
        timer.callback()


class RecordingSigner:
    """Wraps the real signer and records every call."""

    def __init__(self):
        self.calls: List[Tuple[str, Optional[str], str, int]] = []
        self.error: Optional[Exception] = None

    def __call__(self, resource_uri: str, key_name: Optional[str], key: str, expiry: int) -> str:
        self.calls.append((resource_uri, key_name, key, expiry))
        if self.error is not None:
            raise self.error
        return sign(resource_uri, key_name, key, expiry)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def signer() -> RecordingSigner:
    return RecordingSigner()


@pytest.fixture
def credentials() -> TransportConfig:
    return TransportConfig(
        host=HOST,
        device_id=DEVICE_ID,
        shared_access_key=DEVICE_KEY,
    )


@pytest.fixture
def connection_string() -> str:
    return CONNECTION_STRING


@pytest.fixture
def device_key() -> str:
    return DEVICE_KEY


@pytest.fixture
def make_provider(clock, scheduler, signer, credentials):
    """Factory creating providers wired to the fake collaborators."""
    created: List[SharedAccessKeyAuthenticationProvider] = []

    def _make(
        token_valid_time_seconds: Optional[int] = None,
        token_renewal_margin_seconds: Optional[int] = None,
        transport_config: Optional[TransportConfig] = None,
    ) -> SharedAccessKeyAuthenticationProvider:
        provider = SharedAccessKeyAuthenticationProvider(
            transport_config or credentials,
            token_valid_time_seconds,
            token_renewal_margin_seconds,
            signer=signer,
            scheduler=scheduler,
            clock=clock,
        )
        created.append(provider)
        return provider

    yield _make

    for provider in created:
        provider.dispose()
