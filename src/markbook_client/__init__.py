"""
Markbook Client

Async Python client for the Markbook Online REST API (v1.5): markbooks,
student results, students and classes, and scheduled backups, with
automatic session management.
"""

from .client import MarkbookClient, create_client
from .config import ClientSettings, ConfigLoader
from .errors import (
    MarkbookAPIError,
    MarkbookAuthError,
    MarkbookBackupPendingError,
    MarkbookConfigError,
    MarkbookDecodeError,
    MarkbookError,
    MarkbookNoBackupError,
    MarkbookTransportError,
    MarkbookValidationError,
)
from .models import (
    APIAction,
    APIStatus,
    CreateMarkbookRequest,
    Gender,
    NewMarkbookClass,
    NewMarkbookStudent,
    StatusKind,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "MarkbookClient",
    "create_client",
    "ClientSettings",
    "ConfigLoader",
    # Exceptions
    "MarkbookError",
    "MarkbookTransportError",
    "MarkbookAPIError",
    "MarkbookBackupPendingError",
    "MarkbookNoBackupError",
    "MarkbookConfigError",
    "MarkbookValidationError",
    "MarkbookDecodeError",
    "MarkbookAuthError",
    # Models
    "APIAction",
    "APIStatus",
    "StatusKind",
    "Gender",
    "CreateMarkbookRequest",
    "NewMarkbookClass",
    "NewMarkbookStudent",
]
