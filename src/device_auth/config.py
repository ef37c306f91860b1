"""Authentication provider configuration from environment variables and YAML."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from device_auth.provider import (
    DEFAULT_TOKEN_RENEWAL_MARGIN_SECONDS,
    DEFAULT_TOKEN_VALID_TIME_SECONDS,
    SharedAccessKeyAuthenticationProvider,
)

# Default config path: config.yaml in src/ directory
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


@dataclass
class ProviderConfig:
    """Device authentication configuration.

    Load from environment using ProviderConfig.from_env(), or from
    config.yaml plus environment overrides using load_config().
    All timing values in seconds.
    """

    connection_string: str
    token_valid_time_seconds: int = DEFAULT_TOKEN_VALID_TIME_SECONDS
    token_renewal_margin_seconds: int = DEFAULT_TOKEN_RENEWAL_MARGIN_SECONDS

    # Token refresher output
    token_file: Optional[Path] = None

    # Prometheus metrics server port (None = disabled)
    metrics_port: Optional[int] = None

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Load configuration from environment variables.

        Required environment variables:
            DEVICE_CONNECTION_STRING: HostName=...;DeviceId=...;SharedAccessKey=...

        Optional environment variables (with defaults):
            TOKEN_VALID_TIME_SECONDS: 3600 (default)
            TOKEN_RENEWAL_MARGIN_SECONDS: 900 (default)
            DEVICE_TOKEN_FILE: unset (default)
            METRICS_PORT: unset (default)

        Raises:
            ValueError: If required environment variables are missing
        """
        connection_string = os.getenv("DEVICE_CONNECTION_STRING")
        if not connection_string:
            raise ValueError("DEVICE_CONNECTION_STRING environment variable is required")

        token_file = os.getenv("DEVICE_TOKEN_FILE")

        return cls(
            connection_string=connection_string,
            token_valid_time_seconds=int(
                os.getenv("TOKEN_VALID_TIME_SECONDS", str(DEFAULT_TOKEN_VALID_TIME_SECONDS))
            ),
            token_renewal_margin_seconds=int(
                os.getenv(
                    "TOKEN_RENEWAL_MARGIN_SECONDS",
                    str(DEFAULT_TOKEN_RENEWAL_MARGIN_SECONDS),
                )
            ),
            token_file=Path(token_file) if token_file else None,
            metrics_port=_optional_int(os.getenv("METRICS_PORT")),
        )

    def create_provider(self, **collaborators: Any) -> SharedAccessKeyAuthenticationProvider:
        """Build an authentication provider from this configuration."""
        return SharedAccessKeyAuthenticationProvider.from_connection_string(
            self.connection_string,
            self.token_valid_time_seconds,
            self.token_renewal_margin_seconds,
            **collaborators,
        )


def load_config(
    config_path: Optional[Path] = None,
    connection_string: Optional[str] = None,
) -> ProviderConfig:
    """Load configuration from config.yaml and environment variables.

    Configuration priority (highest to lowest):
    1. connection_string argument (connection string only)
    2. Environment variables
    3. config.yaml file (under 'device_auth:' key)
    4. Dataclass defaults

    Example config.yaml:
        device_auth:
          connection_string: "HostName=...;DeviceId=...;SharedAccessKey=..."
          token_valid_time_seconds: 3600
          token_renewal_margin_seconds: 900
          token_file: tokens/device.json
          metrics_port: 8000

    Raises:
        ValueError: If no connection string is configured
    """
    config_path = config_path or DEFAULT_CONFIG_PATH

    data: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}
        data = yaml_data.get("device_auth", {}) or {}

    connection_string = connection_string or os.getenv(
        "DEVICE_CONNECTION_STRING", data.get("connection_string", "")
    )
    if not connection_string:
        raise ValueError(
            "DEVICE_CONNECTION_STRING environment variable or "
            "device_auth.connection_string in config.yaml is required"
        )

    token_file = os.getenv("DEVICE_TOKEN_FILE", data.get("token_file"))

    return ProviderConfig(
        connection_string=connection_string,
        token_valid_time_seconds=int(
            os.getenv(
                "TOKEN_VALID_TIME_SECONDS",
                data.get("token_valid_time_seconds", DEFAULT_TOKEN_VALID_TIME_SECONDS),
            )
        ),
        token_renewal_margin_seconds=int(
            os.getenv(
                "TOKEN_RENEWAL_MARGIN_SECONDS",
                data.get(
                    "token_renewal_margin_seconds", DEFAULT_TOKEN_RENEWAL_MARGIN_SECONDS
                ),
            )
        ),
        token_file=Path(token_file) if token_file else None,
        metrics_port=_optional_int(os.getenv("METRICS_PORT", data.get("metrics_port"))),
    )
