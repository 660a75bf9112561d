"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass
from typing import Optional


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


DEFAULT_HOST = os.getenv("RAWHTTPD_HOST", "0.0.0.0")
DEFAULT_PORT = _env_int("RAWHTTPD_PORT", 4221)
DEFAULT_LOG_JSON = _env_bool("RAWHTTPD_LOG_JSON", True)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("RAWHTTPD_SHUTDOWN_GRACE_SECONDS", 30)

FILES_ENDPOINT_PREFIX = "/files/"
ECHO_ENDPOINT_PREFIX = "/echo/"


@dataclass(frozen=True)
class ServerConfig:
    """Settings fixed at startup and shared read-only by every worker."""

    directory: Optional[str] = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Raw-socket HTTP/1.1 server")
    parser.add_argument(
        "--directory",
        default=None,
        help="Base directory for /files/ (file routes return 404 when omitted)",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    default_log_level = os.getenv("RAWHTTPD_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("RAWHTTPD_LOG_DESTINATION", "stdout")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-json",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_LOG_JSON,
        help="Emit structured JSON log lines",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Grace period in seconds for in-flight connections on shutdown",
    )
    return parser.parse_args(argv)


def build_server_config(args: argparse.Namespace) -> ServerConfig:
    """Freeze parsed arguments into a ServerConfig, absolutizing the directory."""
    directory = os.path.abspath(args.directory) if args.directory else None
    return ServerConfig(
        directory=directory,
        host=args.host,
        port=args.port,
        shutdown_grace_seconds=args.shutdown_grace_seconds,
    )
