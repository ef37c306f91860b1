"""Tests for the token file schema."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from device_auth.credentials import TransportConfig
from device_auth.schemas import TokenRecord

TOKEN = "SharedAccessSignature sr=myhub.azure-devices.net%2Fdevices%2Fsensor-01&sig=abc&se=1700003600"


class TestTokenRecord:
    """Test TokenRecord validation and serialization."""

    def test_from_credentials(self):
        """Builds a record from a credential snapshot and expiry."""
        credentials = TransportConfig(
            host="myhub.azure-devices.net",
            device_id="sensor-01",
            shared_access_key_name="owner",
            shared_access_key="c2VjcmV0",
            shared_access_signature=TOKEN,
        )

        record = TokenRecord.from_credentials(credentials, 1_700_003_600)

        assert record.host == "myhub.azure-devices.net"
        assert record.device_id == "sensor-01"
        assert record.key_name == "owner"
        assert record.shared_access_signature == TOKEN
        assert record.expires_at == datetime.fromtimestamp(1_700_003_600, tz=timezone.utc)

    def test_shared_access_key_is_never_serialized(self):
        """Only the derived token is written, never the key."""
        credentials = TransportConfig(
            host="h", device_id="d", shared_access_key="c2VjcmV0", shared_access_signature=TOKEN
        )

        payload = TokenRecord.from_credentials(credentials, 1).model_dump_json()

        assert "c2VjcmV0" not in payload

    def test_serializes_timestamps_as_iso8601(self):
        record = TokenRecord(
            host="h",
            device_id="d",
            shared_access_signature=TOKEN,
            expires_at=datetime(2023, 11, 14, 23, 13, 20, tzinfo=timezone.utc),
        )

        data = json.loads(record.model_dump_json())

        assert data["expires_at"] == "2023-11-14T23:13:20+00:00"
        assert data["issued_at"].endswith("+00:00")
        assert data["key_name"] is None

    @pytest.mark.parametrize("field", ["host", "device_id", "shared_access_signature"])
    def test_rejects_blank_fields(self, field):
        values = {
            "host": "h",
            "device_id": "d",
            "shared_access_signature": TOKEN,
            "expires_at": datetime.now(timezone.utc),
        }
        values[field] = "   "

        with pytest.raises(ValidationError, match=field):
            TokenRecord(**values)

    def test_unsigned_snapshot_is_rejected(self):
        """A snapshot without a token cannot be persisted."""
        credentials = TransportConfig(host="h", device_id="d")

        with pytest.raises(ValidationError):
            TokenRecord.from_credentials(credentials, 1)
