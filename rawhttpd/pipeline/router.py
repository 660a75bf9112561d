"""Request routing logic.

Routes are tried in table order; exact-path routes are listed before prefix
routes so ``/user-agent`` can never be shadowed by a prefix. A route applies
only when both the method (case-sensitive) and the path matcher agree;
anything else falls through to 404.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from rawhttpd.bootstrap.config import (
    ECHO_ENDPOINT_PREFIX,
    FILES_ENDPOINT_PREFIX,
    ServerConfig,
)
from rawhttpd.domain.correlation_id import CorrelationLoggerAdapter
from rawhttpd.domain.http_types import HttpRequest, HttpResponse
from rawhttpd.domain.response_builders import not_found_response
from rawhttpd.handlers.file_handler import handle_file_get, handle_file_post
from rawhttpd.handlers.system_handlers import (
    handle_echo,
    handle_root,
    handle_user_agent,
)

ROUTER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("rawhttpd.pipeline.router"), {}
)

Handler = Callable[[HttpRequest, str, ServerConfig], HttpResponse]


class MatchKind(Enum):
    EXACT = "exact"
    PREFIX = "prefix"


@dataclass(frozen=True)
class Route:
    """A (method, path matcher, handler) entry in the routing table."""

    method: str
    path: str
    kind: MatchKind
    handler: Handler

    def match(self, method: str, target: str) -> Optional[str]:
        """Return the path remainder when this route applies, else None."""
        if method != self.method:
            return None
        if self.kind is MatchKind.EXACT:
            return "" if target == self.path else None
        if target.startswith(self.path):
            return target[len(self.path) :]
        return None

    @property
    def label(self) -> str:
        suffix = "*" if self.kind is MatchKind.PREFIX else ""
        return f"{self.method} {self.path}{suffix}"


ROUTES: tuple[Route, ...] = (
    Route("GET", "/", MatchKind.EXACT, handle_root),
    Route("GET", "/user-agent", MatchKind.EXACT, handle_user_agent),
    Route("GET", ECHO_ENDPOINT_PREFIX, MatchKind.PREFIX, handle_echo),
    Route("GET", FILES_ENDPOINT_PREFIX, MatchKind.PREFIX, handle_file_get),
    Route("POST", FILES_ENDPOINT_PREFIX, MatchKind.PREFIX, handle_file_post),
)


def find_route(
    method: str, target: str, routes: tuple[Route, ...] = ROUTES
) -> Optional[tuple[Route, str]]:
    """Return the first matching route and its path remainder."""
    for route in routes:
        remainder = route.match(method, target)
        if remainder is not None:
            return route, remainder
    return None


def route_request(
    request: HttpRequest,
    config: ServerConfig,
    routes: tuple[Route, ...] = ROUTES,
) -> HttpResponse:
    """Route the request to the matching handler and return its response."""
    found = find_route(request.method, request.target, routes)
    if found is None:
        ROUTER_LOGGER.info(
            "No matching route found",
            extra={
                "event": "route_not_found",
                "route": request.target,
                "method": request.method,
            },
        )
        return not_found_response()

    route, remainder = found
    if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "Route matched", extra={"event": "route_matched", "route": route.label}
        )
    return route.handler(request, remainder, config)
