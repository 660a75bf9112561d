"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from rawhttpd.domain.headers import HeaderList

WIRE_ENCODING = "iso-8859-1"

STATUS_OK = "HTTP/1.1 200 OK"
STATUS_CREATED = "HTTP/1.1 201 Created"
STATUS_BAD_REQUEST = "HTTP/1.1 400 Bad Request"
STATUS_NOT_FOUND = "HTTP/1.1 404 Not Found"
STATUS_LENGTH_REQUIRED = "HTTP/1.1 411 Length Required"
STATUS_INTERNAL_ERROR = "HTTP/1.1 500 Internal Server Error"


class MalformedRequest(Exception):
    """Raised when the request line or header block cannot be framed."""


class IncompleteBody(Exception):
    """Raised when the client closes before sending the declared body."""


@dataclass
class HttpRequest:
    """Represents a parsed HTTP request."""

    method: str
    target: str
    version: str
    headers: HeaderList = field(default_factory=HeaderList)
    body: bytes = b""
    stream: Optional[BinaryIO] = field(default=None, repr=False, compare=False)


@dataclass
class HttpResponse:
    """Represents an HTTP response to be sent to a client."""

    status_line: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
