"""HTTP Input/Output operations."""

import logging
import re
import socket
from typing import BinaryIO, Iterable, Optional

from rawhttpd.domain.correlation_id import CorrelationLoggerAdapter
from rawhttpd.domain.headers import HeaderList
from rawhttpd.domain.http_types import (
    WIRE_ENCODING,
    HttpRequest,
    HttpResponse,
    IncompleteBody,
    MalformedRequest,
)

IO_LOGGER = CorrelationLoggerAdapter(logging.getLogger("rawhttpd.pipeline.io"), {})

CRLF = b"\r\n"
LINE_TERMINATORS = (b"\r\n", b"\n")
BODY_READ_CHUNK = 65536

_CONTENT_LENGTH_RE = re.compile(r"[+-]?[0-9]+")


def _read_line(stream: BinaryIO) -> bytes:
    """Return one ``\\n``-terminated line, raising when the stream ends first."""
    line = stream.readline()
    if not line.endswith(b"\n"):
        raise MalformedRequest("Stream ended before line terminator")
    return line


def parse_request_line(request_line: str) -> tuple[str, str, str]:
    """Split the request line into method, target and version."""
    parts = request_line.rstrip("\r\n").split(" ", 2)
    if len(parts) < 3:
        raise MalformedRequest("Invalid request line")
    method, target, version = parts
    return method, target, version


def parse_headers(lines: Iterable[str]) -> HeaderList:
    """Convert raw header lines into a header list, skipping lines without a colon."""
    headers = HeaderList()
    for line in lines:
        name, separator, value = line.rstrip("\r\n").partition(":")
        if not separator:
            continue
        headers.add(name, value)
    return headers


def read_headers(stream: BinaryIO) -> HeaderList:
    """Read header lines up to the blank terminator line."""
    lines = []
    while True:
        line = _read_line(stream)
        if line in LINE_TERMINATORS:
            break
        lines.append(line.decode(WIRE_ENCODING))
    return parse_headers(lines)


def receive_request(stream: BinaryIO) -> HttpRequest:
    """Read the request line and headers from a buffered stream.

    The body is left unread; handlers that need it call :func:`read_body`.
    """
    request_line = _read_line(stream).decode(WIRE_ENCODING)
    method, target, version = parse_request_line(request_line)
    headers = read_headers(stream)
    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Parsed request head",
            extra={"method": method, "route": target, "header_count": len(headers)},
        )
    return HttpRequest(method, target, version, headers, stream=stream)


def parse_content_length(header_value: str) -> int:
    """Return a validated, non-negative Content-Length value."""
    if not _CONTENT_LENGTH_RE.fullmatch(header_value):
        raise ValueError("Invalid Content-Length")
    content_length = int(header_value)
    if content_length < 0:
        raise ValueError("Negative Content-Length")
    return content_length


def read_body(stream: Optional[BinaryIO], content_length: int) -> bytes:
    """Read exactly ``content_length`` bytes from the request stream."""
    if content_length == 0:
        return b""
    if stream is None:
        raise IncompleteBody("No request stream available")
    chunks = []
    remaining = content_length
    while remaining:
        chunk = stream.read(min(remaining, BODY_READ_CHUNK))
        if not chunk:
            raise IncompleteBody(
                f"Expected {content_length} bytes, received {content_length - remaining}"
            )
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def serialize_response(response: HttpResponse) -> bytes:
    """Render the status line, headers, blank line and body as wire bytes."""
    lines = [response.status_line]
    lines.extend(f"{name}: {value}" for name, value in response.headers.items())
    head = CRLF.join(line.encode(WIRE_ENCODING) for line in lines) + CRLF + CRLF
    if response.body:
        return head + response.body
    return head


def send_response(client_socket: socket.socket, response: HttpResponse) -> None:
    """Serialize and send the HTTP response over the socket."""
    client_socket.sendall(serialize_response(response))
    IO_LOGGER.debug(
        "Sent response",
        extra={"status": response.status_line, "bytes_out": len(response.body)},
    )
