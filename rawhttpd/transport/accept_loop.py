"""Main connection acceptance loop."""

import logging
import socket
import threading

from rawhttpd.bootstrap.config import ServerConfig
from rawhttpd.bootstrap.socket_factory import create_server_socket
from rawhttpd.domain.correlation_id import CorrelationLoggerAdapter
from rawhttpd.lifecycle.state import ServerLifecycle
from rawhttpd.transport.context import WorkerContext
from rawhttpd.transport.worker import handle_client

ACCEPT_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("rawhttpd.transport.accept"), {}
)


def _handle_accepted_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    handler_context: WorkerContext,
    lifecycle: ServerLifecycle,
) -> threading.Thread:
    """Hand a newly accepted connection to its own worker thread."""
    if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ACCEPT_LOGGER.debug(
            "Client connection accepted",
            extra={
                "event": "client_accepted",
                "client": f"{client_address[0]}:{client_address[1]}",
            },
        )
    client_socket.settimeout(None)
    thread = threading.Thread(
        target=handle_client,
        args=(client_socket, client_address, handler_context),
        daemon=False,
    )
    lifecycle.register_worker(thread)
    thread.start()
    return thread


def run_server(config: ServerConfig, lifecycle: ServerLifecycle) -> None:
    """Accept connections until the lifecycle asks to stop."""
    handler_context = WorkerContext(config=config, lifecycle=lifecycle)
    server_socket = create_server_socket(config)

    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": config.host,
            "port": config.port,
            "directory": config.directory,
        },
    )

    try:
        while not lifecycle.should_stop():
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if lifecycle.should_stop():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                continue

            _handle_accepted_client(
                client_socket, client_address, handler_context, lifecycle
            )
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "shutdown_grace_seconds": config.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_workers(config.shutdown_grace_seconds)
        ACCEPT_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )
