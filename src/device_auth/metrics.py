"""
Prometheus metrics for token renewal monitoring.

Provides instrumentation for:
- Renewal counts by trigger
- Renewal failures by trigger and error category
- Current token expiry per device
- Live provider count
"""

from prometheus_client import Counter, Gauge

# Renewal metrics
token_renewals_total = Counter(
    "device_auth_token_renewals_total",
    "Total number of tokens signed",
    ["trigger"],  # trigger: initial, timer, stale_read
)

token_renewal_errors_total = Counter(
    "device_auth_token_renewal_errors_total",
    "Total number of failed token renewals",
    ["trigger", "error_category"],
)

token_expiry_timestamp_seconds = Gauge(
    "device_auth_token_expiry_timestamp_seconds",
    "Expiry of the current token in seconds since the epoch",
    ["device_id"],
)

# Provider lifecycle
active_providers = Gauge(
    "device_auth_active_providers",
    "Number of authentication providers that have not been disposed",
)


def record_renewal(trigger: str, device_id: str, expiry: int) -> None:
    """
    Record a successful renewal.

    Args:
        trigger: What caused the renewal (initial, timer, stale_read)
        device_id: Device the token was issued for
        expiry: New expiry in seconds since the epoch
    """
    token_renewals_total.labels(trigger=trigger).inc()
    token_expiry_timestamp_seconds.labels(device_id=device_id).set(expiry)


def record_renewal_error(trigger: str, error_category: str) -> None:
    """
    Record a failed renewal.

    Args:
        trigger: What caused the renewal attempt
        error_category: ErrorCategory value of the failure
    """
    token_renewal_errors_total.labels(
        trigger=trigger, error_category=error_category
    ).inc()
