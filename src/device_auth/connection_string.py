"""
Device connection string parsing.

Format: semicolon-separated Key=Value segments, e.g.

    HostName=myhub.azure-devices.net;DeviceId=sensor-01;SharedAccessKey=c2VjcmV0
"""

from typing import Dict, Iterable, Iterator, Optional

from core.errors import ConfigurationError, MissingConnectionParameterError
from core.security.sanitize import sanitize_connection_string

HOST_NAME = "HostName"
DEVICE_ID = "DeviceId"
MODULE_ID = "ModuleId"
GATEWAY_HOST_NAME = "GatewayHostName"
SHARED_ACCESS_KEY_NAME = "SharedAccessKeyName"
SHARED_ACCESS_KEY = "SharedAccessKey"

DEVICE_REQUIRED_FIELDS = (DEVICE_ID, HOST_NAME, SHARED_ACCESS_KEY)


class ConnectionString:
    """Parsed connection string. Keys are case-sensitive."""

    def __init__(self, fields: Dict[str, str]):
        self._fields = dict(fields)

    @classmethod
    def parse(
        cls, source: Optional[str], required_fields: Iterable[str] = ()
    ) -> "ConnectionString":
        """
        Parse a connection string and check required fields.

        The value of a segment is everything after its first '=', so base64
        padding survives. Empty segments are ignored.

        Args:
            source: Connection string text
            required_fields: Field names that must be present and non-empty

        Returns:
            ConnectionString

        Raises:
            ConfigurationError: If source is empty
            MissingConnectionParameterError: If a required field is absent
        """
        if not source:
            raise ConfigurationError(f"connection_string cannot be '{source}'")

        fields: Dict[str, str] = {}
        for segment in source.split(";"):
            segment = segment.strip()
            if not segment:
                continue
            name, _, value = segment.partition("=")
            fields[name.strip()] = value

        for name in required_fields:
            if not fields.get(name):
                raise MissingConnectionParameterError(name)

        return cls(fields)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._fields.get(name, default)

    @property
    def host_name(self) -> Optional[str]:
        return self._fields.get(HOST_NAME)

    @property
    def device_id(self) -> Optional[str]:
        return self._fields.get(DEVICE_ID)

    @property
    def module_id(self) -> Optional[str]:
        return self._fields.get(MODULE_ID)

    @property
    def gateway_host_name(self) -> Optional[str]:
        return self._fields.get(GATEWAY_HOST_NAME)

    @property
    def shared_access_key_name(self) -> Optional[str]:
        return self._fields.get(SHARED_ACCESS_KEY_NAME)

    @property
    def shared_access_key(self) -> Optional[str]:
        return self._fields.get(SHARED_ACCESS_KEY)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __str__(self) -> str:
        return ";".join(f"{name}={value}" for name, value in self._fields.items())

    def __repr__(self) -> str:
        return f"ConnectionString({sanitize_connection_string(str(self))!r})"
