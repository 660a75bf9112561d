"""Pure HTTP response builders."""

import gzip
import zlib
from typing import Optional

from rawhttpd.domain.http_types import (
    STATUS_BAD_REQUEST,
    STATUS_CREATED,
    STATUS_INTERNAL_ERROR,
    STATUS_LENGTH_REQUIRED,
    STATUS_NOT_FOUND,
    STATUS_OK,
    HttpResponse,
)
from rawhttpd.domain.negotiation import accepts_gzip

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


def body_response(payload: bytes, content_type: str) -> HttpResponse:
    """Return a 200 OK response carrying ``payload``."""
    headers = {"Content-Type": content_type, "Content-Length": str(len(payload))}
    return HttpResponse(STATUS_OK, headers, payload)


def compress_if_gzip_supported(
    payload: bytes, accept_encoding: Optional[str], compression_logger
) -> tuple[bytes, dict[str, str]]:
    """Gzip ``payload`` when the client accepts it.

    Compression errors are logged and the payload is returned unchanged with
    no extra headers.
    """
    if not accepts_gzip(accept_encoding):
        return payload, {}
    try:
        compressed = gzip.compress(payload)
    except (OSError, zlib.error) as error:
        compression_logger.warning(
            "Compression failed, sending identity body",
            extra={"event": "gzip_fallback", "error_type": type(error).__name__},
        )
        return payload, {}
    compression_logger.debug(
        "Compressed payload",
        extra={"size": len(payload), "compressed_size": len(compressed)},
    )
    return compressed, {"Content-Encoding": "gzip"}


def text_response(
    payload: bytes, accept_encoding: Optional[str], compression_logger
) -> HttpResponse:
    """Return a text/plain response, compressing when appropriate."""
    payload, encoding_headers = compress_if_gzip_supported(
        payload, accept_encoding, compression_logger
    )
    response = body_response(payload, TEXT_PLAIN)
    response.headers.update(encoding_headers)
    return response


def empty_response() -> HttpResponse:
    """Return a 200 OK response with no headers and no body."""
    return HttpResponse(STATUS_OK)


def created_response() -> HttpResponse:
    """Return a 201 response for a stored upload."""
    return HttpResponse(STATUS_CREATED)


def not_found_response() -> HttpResponse:
    return HttpResponse(STATUS_NOT_FOUND)


def bad_request_response() -> HttpResponse:
    return HttpResponse(STATUS_BAD_REQUEST)


def length_required_response() -> HttpResponse:
    return HttpResponse(STATUS_LENGTH_REQUIRED)


def internal_error_response() -> HttpResponse:
    return HttpResponse(STATUS_INTERNAL_ERROR)
