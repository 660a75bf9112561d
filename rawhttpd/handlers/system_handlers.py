"""Handlers for the root probe, echo and user-agent routes."""

import logging

from rawhttpd.bootstrap.config import ServerConfig
from rawhttpd.domain.correlation_id import CorrelationLoggerAdapter
from rawhttpd.domain.http_types import WIRE_ENCODING, HttpRequest, HttpResponse
from rawhttpd.domain.response_builders import (
    TEXT_PLAIN,
    body_response,
    empty_response,
    text_response,
)

SYSTEM_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("rawhttpd.handlers.system"), {}
)
COMPRESSION_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("rawhttpd.compression"), {}
)


# pylint: disable=unused-argument
def handle_root(
    request: HttpRequest, remainder: str, config: ServerConfig
) -> HttpResponse:
    """Answer the root probe with an empty 200."""
    return empty_response()


def handle_echo(
    request: HttpRequest, remainder: str, config: ServerConfig
) -> HttpResponse:
    """Return the raw path suffix after /echo/ as the body."""
    payload = remainder.encode(WIRE_ENCODING)
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "bytes_out": len(payload)},
        )
    return text_response(
        payload, request.headers.get("accept-encoding"), COMPRESSION_LOGGER
    )


def handle_user_agent(
    request: HttpRequest, remainder: str, config: ServerConfig
) -> HttpResponse:
    """Return the User-Agent header value as a plain-text body."""
    agent = request.headers.get("user-agent", "")
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "User-agent request processed", extra={"event": "user_agent_request"}
        )
    return body_response(agent.encode(WIRE_ENCODING), TEXT_PLAIN)
