"""File download and upload handlers for /files/."""

import logging
import os
import re
import urllib.parse
from pathlib import Path
from typing import Optional

from rawhttpd.bootstrap.config import ServerConfig
from rawhttpd.domain.correlation_id import CorrelationLoggerAdapter
from rawhttpd.domain.http_types import (
    WIRE_ENCODING,
    HttpRequest,
    HttpResponse,
    IncompleteBody,
)
from rawhttpd.domain.response_builders import (
    OCTET_STREAM,
    bad_request_response,
    body_response,
    created_response,
    internal_error_response,
    length_required_response,
    not_found_response,
)
from rawhttpd.domain.sandbox import ForbiddenPath, resolve_sandbox_path
from rawhttpd.pipeline.io import parse_content_length, read_body

FILE_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("rawhttpd.handlers.file"), {}
)

UPLOAD_FILE_MODE = 0o644

_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_filename(raw: str) -> str:
    """Percent-decode a path segment, rejecting truncated or non-hex escapes.

    ``+`` is left alone. Decoded bytes that are not valid UTF-8 are mapped the
    way the OS filesystem encoding would map them.
    """
    if _BAD_ESCAPE_RE.search(raw):
        raise ValueError(f"Invalid percent-encoding in {raw!r}")
    return os.fsdecode(urllib.parse.unquote_to_bytes(raw.encode(WIRE_ENCODING)))


def _resolve_file_target(
    request: HttpRequest, remainder: str, directory: Optional[str]
) -> Optional[Path]:
    """Map the /files/ remainder to a sandboxed path, or None for a 404."""
    if directory is None:
        FILE_LOGGER.info(
            "File route requested without a base directory",
            extra={"event": "files_disabled", "method": request.method},
        )
        return None
    try:
        filename = decode_filename(remainder)
    except ValueError:
        FILE_LOGGER.info(
            "Undecodable filename",
            extra={"event": "bad_filename", "route": request.target},
        )
        return None
    try:
        return resolve_sandbox_path(directory, filename)
    except ForbiddenPath:
        FILE_LOGGER.warning(
            "Forbidden path access blocked",
            extra={
                "event": "forbidden_path",
                "path": filename,
                "method": request.method,
            },
        )
        return None


def handle_file_get(
    request: HttpRequest, remainder: str, config: ServerConfig
) -> HttpResponse:
    """Serve a file from the sandbox as application/octet-stream."""
    resolved_path = _resolve_file_target(request, remainder, config.directory)
    if resolved_path is None:
        return not_found_response()

    try:
        data = resolved_path.read_bytes()
    except OSError as error:
        FILE_LOGGER.info(
            "File not found",
            extra={
                "event": "file_not_found",
                "path": resolved_path.as_posix(),
                "error_type": type(error).__name__,
            },
        )
        return not_found_response()

    FILE_LOGGER.info(
        "File read operation complete",
        extra={
            "event": "file_read_complete",
            "path": resolved_path.as_posix(),
            "bytes_out": len(data),
        },
    )
    return body_response(data, OCTET_STREAM)


def write_file(path: Path, data: bytes) -> None:
    """Create or truncate ``path`` with non-executable permissions and write ``data``."""
    descriptor = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, UPLOAD_FILE_MODE)
    with os.fdopen(descriptor, "wb") as file_handle:
        file_handle.write(data)


def handle_file_post(
    request: HttpRequest, remainder: str, config: ServerConfig
) -> HttpResponse:
    """Store the request body under the sandbox.

    The body is only read once the target path and Content-Length have been
    validated, so rejected uploads never consume it.
    """
    resolved_path = _resolve_file_target(request, remainder, config.directory)
    if resolved_path is None:
        return not_found_response()

    declared_length = request.headers.get("content-length")
    if not declared_length:
        FILE_LOGGER.info(
            "Upload without Content-Length",
            extra={"event": "length_required", "path": resolved_path.as_posix()},
        )
        return length_required_response()
    try:
        content_length = parse_content_length(declared_length)
    except ValueError:
        FILE_LOGGER.info(
            "Invalid Content-Length on upload",
            extra={"event": "invalid_content_length", "path": resolved_path.as_posix()},
        )
        return bad_request_response()

    try:
        request.body = read_body(request.stream, content_length)
    except IncompleteBody:
        FILE_LOGGER.warning(
            "Upload body shorter than Content-Length",
            extra={"event": "incomplete_body", "path": resolved_path.as_posix()},
        )
        return bad_request_response()

    if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
        FILE_LOGGER.debug(
            "File write started",
            extra={
                "event": "file_write_started",
                "path": resolved_path.as_posix(),
                "bytes_in": len(request.body),
            },
        )
    try:
        write_file(resolved_path, request.body)
    except OSError as error:
        FILE_LOGGER.error(
            "File write failed",
            extra={
                "event": "file_write_failed",
                "path": resolved_path.as_posix(),
                "error_type": type(error).__name__,
            },
        )
        return internal_error_response()

    FILE_LOGGER.info(
        "File write complete",
        extra={
            "event": "file_write_complete",
            "path": resolved_path.as_posix(),
            "bytes_in": len(request.body),
        },
    )
    return created_response()
