"""
Kafka SASL/OAUTHBEARER integration.

aiokafka producers and consumers ask ``sasl_oauth_token_provider`` for a
token on every (re)authentication. The adapter here answers with the
provider's current shared access signature, renewing it first when stale.

Usage:
    provider = SharedAccessKeyAuthenticationProvider.from_connection_string(cs)
    producer = AIOKafkaProducer(
        bootstrap_servers=servers,
        **build_sasl_config(provider),
    )
"""

from typing import Any, Dict

from aiokafka.abc import AbstractTokenProvider
from aiokafka.helpers import create_ssl_context

from device_auth.common.logging import get_logger
from device_auth.provider import SharedAccessKeyAuthenticationProvider

logger = get_logger(__name__)

SSL_PROTOCOLS = ("SSL", "SASL_SSL")


class SasTokenProvider(AbstractTokenProvider):
    """OAUTHBEARER token provider backed by a shared access key provider."""

    def __init__(self, provider: SharedAccessKeyAuthenticationProvider):
        self._provider = provider

    async def token(self) -> str:
        credentials = self._provider.get_device_credentials()
        return credentials.shared_access_signature


def create_kafka_oauth_callback(
    provider: SharedAccessKeyAuthenticationProvider,
) -> SasTokenProvider:
    """Create the aiokafka ``sasl_oauth_token_provider`` for a provider."""
    return SasTokenProvider(provider)


def build_sasl_config(
    provider: SharedAccessKeyAuthenticationProvider,
    security_protocol: str = "SASL_SSL",
) -> Dict[str, Any]:
    """
    Build aiokafka client kwargs for OAUTHBEARER authentication.

    Args:
        provider: Authentication provider supplying tokens
        security_protocol: SASL_SSL (default) or SASL_PLAINTEXT

    Returns:
        Dict with security_protocol, sasl_mechanism, sasl_oauth_token_provider
        and, for SSL protocols, ssl_context
    """
    config: Dict[str, Any] = {
        "security_protocol": security_protocol,
        "sasl_mechanism": "OAUTHBEARER",
        "sasl_oauth_token_provider": create_kafka_oauth_callback(provider),
    }
    if security_protocol in SSL_PROTOCOLS:
        config["ssl_context"] = create_ssl_context()

    logger.debug(
        "Built OAUTHBEARER client config",
        extra={"device_id": provider.device_id},
    )
    return config
