"""Tests for connection string parsing."""

import pytest

from core.errors import ConfigurationError, MissingConnectionParameterError
from device_auth.connection_string import DEVICE_REQUIRED_FIELDS, ConnectionString

DEVICE_CS = "HostName=myhub.azure-devices.net;DeviceId=sensor-01;SharedAccessKey=c2VjcmV0LWRldmljZS1rZXk="


class TestParse:
    """Test ConnectionString.parse."""

    def test_parses_device_fields(self):
        """All standard device fields are exposed as properties."""
        cs = ConnectionString.parse(DEVICE_CS, DEVICE_REQUIRED_FIELDS)

        assert cs.host_name == "myhub.azure-devices.net"
        assert cs.device_id == "sensor-01"
        assert cs.shared_access_key == "c2VjcmV0LWRldmljZS1rZXk="
        assert cs.shared_access_key_name is None
        assert cs.module_id is None
        assert cs.gateway_host_name is None

    def test_value_keeps_everything_after_first_equals(self):
        """Base64 padding in the key is preserved."""
        cs = ConnectionString.parse("SharedAccessKey=abc==;HostName=h")

        assert cs.shared_access_key == "abc=="

    def test_optional_fields(self):
        """Module, gateway and key name fields are parsed when present."""
        cs = ConnectionString.parse(
            DEVICE_CS + ";ModuleId=filter;GatewayHostName=edge.local;SharedAccessKeyName=owner"
        )

        assert cs.module_id == "filter"
        assert cs.gateway_host_name == "edge.local"
        assert cs.shared_access_key_name == "owner"

    def test_ignores_empty_segments(self):
        """Trailing and doubled separators are tolerated."""
        cs = ConnectionString.parse("HostName=h;;DeviceId=d;", ["HostName", "DeviceId"])

        assert list(cs) == ["HostName", "DeviceId"]

    def test_keys_are_case_sensitive(self):
        """A lower-cased key does not satisfy a required field."""
        with pytest.raises(MissingConnectionParameterError):
            ConnectionString.parse("hostname=h;DeviceId=d;SharedAccessKey=k", DEVICE_REQUIRED_FIELDS)

    @pytest.mark.parametrize("source", ["", None])
    def test_empty_source_raises(self, source):
        """Empty input is a configuration error, not a missing field."""
        with pytest.raises(ConfigurationError, match="connection_string cannot be") as exc_info:
            ConnectionString.parse(source, DEVICE_REQUIRED_FIELDS)

        assert not isinstance(exc_info.value, MissingConnectionParameterError)

    @pytest.mark.parametrize("missing", ["DeviceId", "HostName", "SharedAccessKey"])
    def test_missing_required_field_names_parameter(self, missing):
        """The error carries the name of the missing field."""
        source = ";".join(
            seg for seg in DEVICE_CS.split(";") if not seg.startswith(missing + "=")
        )

        with pytest.raises(MissingConnectionParameterError) as exc_info:
            ConnectionString.parse(source, DEVICE_REQUIRED_FIELDS)

        assert exc_info.value.parameter == missing
        assert str(exc_info.value) == f"The connection string is missing the property: {missing}"
        assert exc_info.value.context["parameter"] == missing

    def test_empty_required_value_counts_as_missing(self):
        """A present but empty required field is rejected."""
        with pytest.raises(MissingConnectionParameterError, match="SharedAccessKey"):
            ConnectionString.parse(
                "HostName=h;DeviceId=d;SharedAccessKey=", DEVICE_REQUIRED_FIELDS
            )

    def test_required_fields_checked_in_order(self):
        """The first missing field in required order is reported."""
        with pytest.raises(MissingConnectionParameterError) as exc_info:
            ConnectionString.parse("GatewayHostName=g", DEVICE_REQUIRED_FIELDS)

        assert exc_info.value.parameter == "DeviceId"


class TestAccessors:
    """Test mapping-style access and rendering."""

    def test_contains_and_get(self):
        cs = ConnectionString.parse(DEVICE_CS)

        assert "HostName" in cs
        assert "ModuleId" not in cs
        assert cs.get("ModuleId", "none") == "none"

    def test_str_round_trips_fields(self):
        cs = ConnectionString.parse(DEVICE_CS)

        assert str(cs) == DEVICE_CS

    def test_repr_redacts_key(self):
        """The shared access key never appears in repr."""
        cs = ConnectionString.parse(DEVICE_CS)

        assert "c2VjcmV0" not in repr(cs)
        assert "SharedAccessKey=[REDACTED]" in repr(cs)
