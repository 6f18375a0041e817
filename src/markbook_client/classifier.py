"""
Failure classification.

Pure functions mapping a transport outcome, an HTTP status code or a decoded
envelope status to exactly one ``MarkbookError``. Nothing here performs I/O,
logs, or raises: callers decide what to do with the returned error.
"""

from __future__ import annotations

import httpx

from .errors import (
    MarkbookAPIError,
    MarkbookAuthError,
    MarkbookBackupPendingError,
    MarkbookConfigError,
    MarkbookError,
    MarkbookNoBackupError,
    MarkbookTransportError,
)
from .models import APIStatus, StatusKind


def classify_http_status(status_code: int) -> MarkbookTransportError | None:
    """Return a transport error for any status outside 200-299."""
    if 200 <= status_code < 300:
        return None
    return MarkbookTransportError(f"HTTP error: {status_code}", status_code)


def classify_transport_failure(exc: httpx.RequestError | httpx.InvalidURL) -> MarkbookError:
    """Map an exception raised by httpx while sending a request.

    A malformed URL or unsupported scheme means the request could never be
    built, which is a configuration problem rather than a transport one.
    """
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return MarkbookConfigError(f"Could not construct a valid request URL: {exc}")
    if isinstance(exc, httpx.TimeoutException):
        return MarkbookTransportError(f"Request timed out: {exc}")
    return MarkbookTransportError(f"Request failed: {exc}")


def classify_status(status: APIStatus) -> MarkbookAPIError | None:
    """Return the API error for a non-``OKAY`` envelope status.

    Unrecognised ``ERROR:*`` strings are passed through verbatim as a generic
    rejection.
    """
    kind = status.kind
    if kind is StatusKind.OKAY:
        return None
    if kind is StatusKind.PENDING:
        return MarkbookBackupPendingError(status)
    if kind is StatusKind.NO_BACKUP:
        return MarkbookNoBackupError(status)
    return MarkbookAPIError(status)


def wrap_authentication_failure(exc: Exception) -> MarkbookAuthError:
    """Any failure inside the handshake surfaces as an authentication failure."""
    if isinstance(exc, MarkbookAuthError):
        return exc
    return MarkbookAuthError(exc)
