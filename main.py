"""Raw-socket HTTP/1.1 server: root probe, echo, user-agent and file routes."""

import logging
import signal
import sys

from rawhttpd.bootstrap.config import build_server_config, parse_cli_args
from rawhttpd.bootstrap.logging_setup import configure_logging
from rawhttpd.domain.correlation_id import CorrelationLoggerAdapter
from rawhttpd.lifecycle.state import ServerLifecycle
from rawhttpd.transport.accept_loop import run_server

SERVER_LOGGER = CorrelationLoggerAdapter(logging.getLogger("rawhttpd.server"), {})


def main(argv: list[str] | None = None) -> None:
    """Start the HTTP server and spawn a worker thread per connection."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination, args.log_json)

    config = build_server_config(args)
    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal",
            extra={"event": "shutdown_signal", "signal": signum},
        )
        lifecycle.begin_shutdown()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "directory": config.directory,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
        },
    )
    run_server(config, lifecycle)


if __name__ == "__main__":
    main()
