"""
Token refresher for a device connection string.

Keeps a JSON token file fresh so local processes that cannot hold the shared
access key can still authenticate as the device.

Usage:
    # Print one token and exit
    python -m device_auth --connection-string "HostName=...;DeviceId=...;SharedAccessKey=..." --once

    # Keep tokens/device.json fresh, with metrics on :8000
    python -m device_auth --token-file tokens/device.json --metrics-port 8000

    # Settings from config.yaml (device_auth: key) plus environment
    python -m device_auth --config config.yaml

Environment:
    DEVICE_CONNECTION_STRING, TOKEN_VALID_TIME_SECONDS,
    TOKEN_RENEWAL_MARGIN_SECONDS, DEVICE_TOKEN_FILE, METRICS_PORT
"""

import argparse
import logging
import os
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from prometheus_client import start_http_server

from core.errors import DeviceAuthError
from core.logging.setup import setup_logging
from device_auth.common.logging import log_exception, log_with_context
from device_auth.config import ProviderConfig, load_config
from device_auth.credentials import TransportConfig
from device_auth.events import ERROR, NEW_TOKEN_AVAILABLE
from device_auth.provider import SharedAccessKeyAuthenticationProvider
from device_auth.schemas import TokenRecord

# Placeholder logger until setup_logging() is called in main()
logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Keep a device shared access signature fresh",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--connection-string",
        type=str,
        default=os.getenv("DEVICE_CONNECTION_STRING"),
        help="Device connection string (default: $DEVICE_CONNECTION_STRING)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yaml with a device_auth: section",
    )
    parser.add_argument(
        "--token-file",
        type=Path,
        default=None,
        help="Write the current token to this JSON file on every renewal",
    )
    parser.add_argument(
        "--valid-time",
        type=int,
        default=None,
        help="Token validity in seconds (default: 3600)",
    )
    parser.add_argument(
        "--renewal-margin",
        type=int,
        default=None,
        help="Renew this many seconds before expiry (default: 900)",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Port for Prometheus metrics server (default: disabled)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Print one token record and exit",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for rotating log files (default: console only)",
    )
    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="JSON format for file logs (default: on)",
    )

    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> ProviderConfig:
    """
    Combine config.yaml, environment and command line.

    Command line arguments take precedence over everything else.

    Raises:
        ValueError: If no connection string is available
    """
    config = load_config(args.config, connection_string=args.connection_string)

    if args.valid_time is not None:
        config.token_valid_time_seconds = args.valid_time
    if args.renewal_margin is not None:
        config.token_renewal_margin_seconds = args.renewal_margin
    if args.token_file is not None:
        config.token_file = args.token_file
    if args.metrics_port is not None:
        config.metrics_port = args.metrics_port

    return config


def write_token_atomic(token_file: Path, record: TokenRecord) -> None:
    """Write token record atomically."""
    token_file = Path(token_file)
    token_file.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = token_file.parent / f".{token_file.name}_{os.getpid()}.tmp"

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(record.model_dump_json(indent=2))
        tmp_path.replace(token_file)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink()
        raise

    log_with_context(
        logger,
        logging.INFO,
        "Token written",
        token_file=str(token_file),
        device_id=record.device_id,
    )


class TokenFileWriter:
    """newTokenAvailable listener that persists each token."""

    def __init__(self, provider: SharedAccessKeyAuthenticationProvider, token_file: Path):
        self.provider = provider
        self.token_file = token_file

    def __call__(self, credentials: TransportConfig) -> None:
        record = TokenRecord.from_credentials(
            credentials, self.provider.current_token_expiry_time_seconds
        )
        write_token_atomic(self.token_file, record)


def _on_renewal_error(exc: BaseException) -> None:
    log_exception(logger, exc, "Token renewal failed; next poll will retry renewal")


def keep_fresh(
    provider: SharedAccessKeyAuthenticationProvider,
    stop_event: threading.Event,
    poll_interval: float = 1.0,
) -> None:
    """
    Poll the provider until stop_event is set.

    The timer chain stops after a failed renewal; polling reads the token so
    a stale one is renewed and the chain restarts. A signing failure on the
    poll path raises.
    """
    while not stop_event.wait(timeout=poll_interval):
        provider.get_device_credentials()


def run(config: ProviderConfig, once: bool = False) -> int:
    """Create the provider and keep it running until signalled."""
    provider = config.create_provider()

    try:
        credentials = provider.get_device_credentials()
        record = TokenRecord.from_credentials(
            credentials, provider.current_token_expiry_time_seconds
        )

        if config.token_file:
            write_token_atomic(config.token_file, record)

        if once:
            print(record.model_dump_json(indent=2))
            return 0

        if config.token_file:
            provider.on(NEW_TOKEN_AVAILABLE, TokenFileWriter(provider, config.token_file))
        provider.on(ERROR, _on_renewal_error)

        if config.metrics_port:
            start_http_server(config.metrics_port)
            log_with_context(
                logger,
                logging.INFO,
                "Metrics server started",
                metrics_port=config.metrics_port,
            )

        stop_event = threading.Event()

        def handle_signal(signum, frame):
            logger.info(f"Received signal {signum}, shutting down")
            stop_event.set()

        signal.signal(signal.SIGINT, handle_signal)
        signal.signal(signal.SIGTERM, handle_signal)

        log_with_context(
            logger,
            logging.INFO,
            "Token refresher running",
            device_id=provider.device_id,
            token_valid_time_seconds=provider.token_valid_time_seconds,
            token_renewal_margin_seconds=provider.token_renewal_margin_seconds,
        )

        keep_fresh(provider, stop_event)

        return 0
    finally:
        provider.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    setup_logging(
        name="device_auth",
        domain="device_auth",
        stage="refresher",
        log_dir=args.log_dir,
        json_format=args.json_logs,
        console_level=getattr(logging, args.log_level),
        log_to_file=args.log_dir is not None,
    )

    try:
        config = resolve_config(args)
        return run(config, once=args.once)
    except (ValueError, DeviceAuthError) as e:
        log_exception(logger, e, "Token refresher failed to start", include_traceback=False)
        return 1
    except OSError as e:
        # Token file not writable, metrics port in use
        log_exception(logger, e, "Token refresher I/O failure")
        return 1


if __name__ == "__main__":
    sys.exit(main())
