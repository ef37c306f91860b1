"""Device credential value objects handed to transports."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class AuthenticationType(str, Enum):
    """How a provider authenticates the device with the hub."""

    TOKEN = "token"
    X509 = "x509"


@dataclass(frozen=True)
class TransportConfig:
    """Snapshot of the device identity and its current token.

    Instances are immutable. Each renewal produces a new snapshot, so a
    transport holding one never sees it change.

    Attributes:
        host: Hub host name (e.g., "myhub.azure-devices.net")
        device_id: Device identifier registered with the hub
        shared_access_key_name: Policy name, or None for device-scoped keys
        shared_access_key: Base64 secret key (excluded from repr)
        shared_access_signature: Current signed token, None before issue
    """

    host: str
    device_id: str
    shared_access_key_name: Optional[str] = None
    shared_access_key: Optional[str] = field(default=None, repr=False)
    shared_access_signature: Optional[str] = field(default=None, repr=False)

    def with_signature(self, signature: str) -> "TransportConfig":
        """Return a copy carrying a new token."""
        return replace(self, shared_access_signature=signature)

    @property
    def resource_path(self) -> str:
        """Unencoded resource the token is scoped to."""
        return f"{self.host}/devices/{self.device_id}"
