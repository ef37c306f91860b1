"""
Token file schema.

Contains the Pydantic model written by the token refresher so other local
processes can pick up the current token.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from device_auth.credentials import TransportConfig


class TokenRecord(BaseModel):
    """Current token for a device, as persisted to the token file.

    Attributes:
        host: Hub host name
        device_id: Device identifier
        key_name: Shared access key name, if the key is policy-scoped
        shared_access_signature: Serialized token
        expires_at: Token expiry (UTC)
        issued_at: When the record was written (UTC)
    """

    host: str = Field(..., description="Hub host name", min_length=1)
    device_id: str = Field(..., description="Device identifier", min_length=1)
    key_name: Optional[str] = Field(
        default=None, description="Shared access key name"
    )
    shared_access_signature: str = Field(
        ..., description="Serialized shared access signature", min_length=1
    )
    expires_at: datetime = Field(..., description="Token expiry (UTC)")
    issued_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Record creation time (UTC)",
    )

    @field_validator("host", "device_id", "shared_access_signature")
    @classmethod
    def validate_non_empty_strings(cls, v: str, info) -> str:
        """Ensure string fields are not empty or whitespace-only."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()

    @field_serializer("expires_at", "issued_at")
    def serialize_timestamp(self, value: datetime) -> str:
        return value.isoformat()

    @classmethod
    def from_credentials(cls, credentials: TransportConfig, expiry: int) -> "TokenRecord":
        """
        Build a record from a credential snapshot.

        Args:
            credentials: Snapshot carrying a signed token
            expiry: Token expiry in seconds since the epoch
        """
        return cls(
            host=credentials.host,
            device_id=credentials.device_id,
            key_name=credentials.shared_access_key_name,
            shared_access_signature=credentials.shared_access_signature or "",
            expires_at=datetime.fromtimestamp(expiry, tz=timezone.utc),
        )
