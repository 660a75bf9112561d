"""Worker thread logic for handling individual client connections."""

import logging
import socket
import threading
from typing import BinaryIO, Optional

from rawhttpd.domain.correlation_id import (
    CorrelationLoggerAdapter,
    clear_correlation_id,
    generate_correlation_id,
    set_correlation_id,
)
from rawhttpd.domain.http_types import HttpRequest, MalformedRequest
from rawhttpd.lifecycle.state import ServerLifecycle
from rawhttpd.pipeline.io import receive_request, send_response
from rawhttpd.pipeline.router import route_request
from rawhttpd.transport.context import WorkerContext

WORKER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("rawhttpd.transport.worker"), {}
)


def _read_request(stream: BinaryIO, client_addr_str: str) -> Optional[HttpRequest]:
    """Parse the request head, returning None when the connection must close silently."""
    try:
        return receive_request(stream)
    except MalformedRequest:
        WORKER_LOGGER.info(
            "Malformed request, closing without response",
            extra={
                "event": "malformed_request",
                "client": client_addr_str,
            },
        )
        return None


def _process_connection(
    client_socket: socket.socket,
    stream: BinaryIO,
    context: WorkerContext,
    client_addr_str: str,
) -> None:
    request = _read_request(stream, client_addr_str)
    if request is None:
        return

    WORKER_LOGGER.debug(
        "Request line parsed",
        extra={
            "event": "request_line_parsed",
            "method": request.method,
            "route": request.target,
        },
    )

    response = route_request(request, context.config)
    send_response(client_socket, response)
    WORKER_LOGGER.info(
        "Request complete",
        extra={
            "event": "request_complete",
            "client": client_addr_str,
            "method": request.method,
            "route": request.target,
            "status": response.status_line,
        },
    )


def _close_connection(
    client_socket: socket.socket, stream: BinaryIO, client_addr_str: str
) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    stream.close()
    client_socket.close()
    WORKER_LOGGER.debug(
        "Socket closed",
        extra={"event": "socket_closed", "client": client_addr_str},
    )


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Serve exactly one request on ``client_socket`` and close it."""
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    lifecycle: Optional[ServerLifecycle] = context.lifecycle
    set_correlation_id(generate_correlation_id())
    WORKER_LOGGER.debug(
        "Request processing started",
        extra={"event": "request_started", "client": client_addr_str},
    )

    stream = client_socket.makefile("rb")
    try:
        _process_connection(client_socket, stream, context, client_addr_str)
    except (ConnectionError, TimeoutError, OSError, UnicodeDecodeError) as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
            exc_info=True,
        )
    finally:
        _close_connection(client_socket, stream, client_addr_str)
        if lifecycle is not None:
            lifecycle.cleanup_worker(threading.current_thread())
        clear_correlation_id()
