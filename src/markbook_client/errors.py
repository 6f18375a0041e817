"""Exceptions raised by the Markbook Online client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import APIStatus


class MarkbookError(Exception):
    """Base exception for every error raised by the client."""

    pass


class MarkbookTransportError(MarkbookError):
    """The server answered outside the 2xx range, or the request never completed.

    ``status_code`` is ``None`` when the failure happened below HTTP
    (connection refused, DNS, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MarkbookAPIError(MarkbookError):
    """A well-formed response carried a status other than ``OKAY``."""

    def __init__(self, status: APIStatus):
        super().__init__(f"API error: {status.raw}")
        self.status = status


class MarkbookBackupPendingError(MarkbookAPIError):
    """The scheduled backup has not been produced yet (``ERROR:pending``)."""

    pass


class MarkbookNoBackupError(MarkbookAPIError):
    """No backup has been scheduled (``ERROR:no backup``)."""

    pass


class MarkbookConfigError(MarkbookError):
    """A request could not be constructed from the client settings or arguments."""

    pass


class MarkbookValidationError(MarkbookError):
    """A local precondition failed; nothing was sent to the server."""

    pass


class MarkbookDecodeError(MarkbookError):
    """The response body did not match the expected shape."""

    pass


class MarkbookAuthError(MarkbookError):
    """The session could not be established or refreshed."""

    def __init__(self, cause: Exception):
        super().__init__(f"Authentication failed: {cause}")
        self.cause = cause
