"""
Markbook Online REST API client.

High-level async wrapper around the Markbook Online v1.5 API. Session
handling is automatic: the first call authenticates, later calls reuse the
session until it is about to expire, and concurrent calls share a single
authentication handshake.

API documentation:
https://smpcsonline.com.au/markbook/api/v1.5
"""

from __future__ import annotations

import time
import unicodedata
from pathlib import Path

import httpx

from .config import ClientSettings, ConfigLoader
from .errors import MarkbookValidationError
from .executor import OperationDescriptor, RequestExecutor
from .models import (
    DEFAULT_BASE_URL,
    APIAction,
    CreateClassResponse,
    CreateMarkbookRequest,
    CreateMarkbookResponse,
    CreateStudentResponse,
    Gender,
    GetBackupURLResponse,
    GetMarkbookAltResponse,
    GetMarkbookResponse,
    GetOutcomesAltResponse,
    GetOutcomesResponse,
    MarkbookListResponse,
    StatusOnlyResponse,
    UserListResponse,
)
from .session import SESSION_LIFETIME, Account, Authenticator, Clock, SessionManager
from .transport import Transport
from .utils.logging import get_logger

logger = get_logger(__name__)

# Minimum length of the markbook-name filter accepted by schedulebackup
MIN_BACKUP_MATCHING_LENGTH = 2


def _gender(value: Gender | str) -> Gender:
    try:
        return Gender(value)
    except ValueError as e:
        allowed = ", ".join(g.value for g in Gender)
        raise MarkbookValidationError(f"Invalid gender {value!r}; expected one of: {allowed}") from e


class MarkbookClient:
    """
    Async client for the Markbook Online REST API.

    Usage:
        async with MarkbookClient(
            api_key="YOUR_32_CHAR_API_KEY",
            username="adminuser",
            password="secret",
        ) as client:
            markbooks = await client.markbook_list()

    A single instance is meant to be shared by many concurrent tasks.
    """

    def __init__(
        self,
        api_key: str,
        username: str,
        password: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = Transport.DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
        session_lifetime: float = SESSION_LIFETIME,
        clock: Clock = time.monotonic,
    ):
        """
        Initialize the client.

        Args:
            api_key: The 32-character school-specific API key
            username: Login of a user with "Allow user administration" permission
            password: Password for that user
            base_url: API endpoint; override for testing
            timeout: Per-request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            transport: Custom httpx transport (e.g. ``httpx.MockTransport``)
            http_client: Pre-configured httpx client; not closed by ``aclose``
            session_lifetime: Seconds after which a session is renewed
            clock: Monotonic time source used for session expiry
        """
        self.base_url = base_url.rstrip("/")
        self.account = Account(api_key=api_key, username=username, password=password)

        self.transport = Transport(
            timeout=timeout,
            verify_ssl=verify_ssl,
            transport=transport,
            http_client=http_client,
        )
        self.session = SessionManager(
            self.account,
            Authenticator(self.transport, self.base_url, clock=clock),
            lifetime=session_lifetime,
            clock=clock,
        )
        self.executor = RequestExecutor(self.transport, self.session, api_key, self.base_url)

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs) -> "MarkbookClient":
        """Create a client from loaded settings; extra kwargs go to ``__init__``."""
        return cls(
            api_key=settings.api_key,
            username=settings.username,
            password=settings.password,
            base_url=settings.base_url,
            timeout=settings.timeout,
            verify_ssl=settings.verify_ssl,
            **kwargs,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.transport.aclose()

    async def __aenter__(self) -> "MarkbookClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def authenticate(self) -> None:
        """
        Establish a new session now instead of on the next call.

        Raises:
            MarkbookAuthError: If the handshake fails
        """
        await self.session.refresh()

    # -------------------------------------------------------------------------
    # Lists
    # -------------------------------------------------------------------------

    async def markbook_list(self) -> MarkbookListResponse:
        """Return every markbook in the school database."""
        return await self.executor.execute(
            OperationDescriptor.read(APIAction.MARKBOOK_LIST, MarkbookListResponse)
        )

    async def user_list(self) -> UserListResponse:
        """Return every user in the school database."""
        return await self.executor.execute(
            OperationDescriptor.read(APIAction.USER_LIST, UserListResponse)
        )

    # -------------------------------------------------------------------------
    # Markbook contents
    # -------------------------------------------------------------------------

    async def get_markbook(self, key: int) -> GetMarkbookResponse:
        """
        Return the full contents of a markbook, with per-student result arrays.

        Args:
            key: Markbook key from ``markbook_list()``
        """
        return await self.executor.execute(
            OperationDescriptor.read(APIAction.GET_MARKBOOK, GetMarkbookResponse, ("key", key))
        )

    async def get_markbook_alt(self, key: int) -> GetMarkbookAltResponse:
        """Return a markbook in the flat alternate format (one row per result)."""
        return await self.executor.execute(
            OperationDescriptor.read(
                APIAction.GET_MARKBOOK_ALT, GetMarkbookAltResponse, ("key", key)
            )
        )

    async def get_outcomes(self, key: int) -> GetOutcomesResponse:
        """Return outcome levels for all students in a markbook."""
        return await self.executor.execute(
            OperationDescriptor.read(APIAction.GET_OUTCOMES, GetOutcomesResponse, ("key", key))
        )

    async def get_outcomes_alt(self, key: int) -> GetOutcomesAltResponse:
        return await self.executor.execute(
            OperationDescriptor.read(
                APIAction.GET_OUTCOMES_ALT, GetOutcomesAltResponse, ("key", key)
            )
        )

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    async def put_student_result(
        self,
        markbook_key: int,
        student_key: int,
        sid: str,
        task_key: int,
        task_name: str,
        result: str,
    ) -> None:
        """
        Record a single student result.

        Args:
            markbook_key: Markbook key from ``markbook_list()``
            student_key: Student key from ``get_markbook()``
            sid: Student ID from the same source as ``student_key``
            task_key: Task key from the markbook's task list
            task_name: Task name from the markbook's task list
            result: The result value to record

        Raises:
            MarkbookAPIError: If the server rejects the result
        """
        logger.info(f"Putting result for student {student_key} on task {task_key}")

        await self.executor.execute(
            OperationDescriptor.read(
                APIAction.PUT_STUDENT_RESULT,
                StatusOnlyResponse,
                ("key", markbook_key),
                ("studentkey", student_key),
                ("sid", sid),
                ("taskkey", task_key),
                ("taskname", task_name),
                ("result", result),
            )
        )

    # -------------------------------------------------------------------------
    # Students and classes
    # -------------------------------------------------------------------------

    async def create_student(
        self,
        markbook_key: int,
        sid: str,
        family_name: str,
        given_name: str,
        preferred_name: str,
        gender: Gender | str,
        class_key: int,
    ) -> CreateStudentResponse:
        """
        Create a student in a class of a markbook.

        Args:
            markbook_key: Markbook key from ``markbook_list()``
            sid: Student ID not already present in the markbook
            family_name: Family name
            given_name: Given name
            preferred_name: Preferred name (may be empty)
            gender: Student gender
            class_key: Class key from ``get_markbook()``

        Returns:
            Response carrying the new ``student_key``
        """
        logger.info(f"Creating student {sid} in markbook {markbook_key}")

        return await self.executor.execute(
            OperationDescriptor.read(
                APIAction.CREATE_STUDENT,
                CreateStudentResponse,
                ("key", markbook_key),
                ("sid", sid),
                ("family", family_name),
                ("given", given_name),
                ("preferred", preferred_name),
                ("gender", _gender(gender)),
                ("classkey", class_key),
            )
        )

    async def update_student(
        self,
        markbook_key: int,
        student_key: int,
        sid: str,
        family_name: str,
        given_name: str,
        preferred_name: str,
        gender: Gender | str,
    ) -> None:
        """
        Update a student's name details.

        Every field must be supplied even if unchanged. ``sid`` identifies the
        student and cannot itself be changed.
        """
        logger.info(f"Updating student {student_key} in markbook {markbook_key}")

        await self.executor.execute(
            OperationDescriptor.read(
                APIAction.UPDATE_STUDENT,
                StatusOnlyResponse,
                ("key", markbook_key),
                ("studentkey", student_key),
                ("sid", sid),
                ("family", family_name),
                ("given", given_name),
                ("preferred", preferred_name),
                ("gender", _gender(gender)),
            )
        )

    async def update_student_class(
        self,
        markbook_key: int,
        student_key: int,
        sid: str,
        class_key: int,
    ) -> None:
        """Move a student to another class; also restores a deleted student."""
        logger.info(f"Moving student {student_key} to class {class_key}")

        await self.executor.execute(
            OperationDescriptor.read(
                APIAction.UPDATE_STUDENT_CLASS,
                StatusOnlyResponse,
                ("key", markbook_key),
                ("studentkey", student_key),
                ("sid", sid),
                ("classkey", class_key),
            )
        )

    async def delete_student(self, markbook_key: int, student_key: int, sid: str) -> None:
        """
        Soft-delete a student from a markbook.

        The student stays in the database and can be restored with
        ``update_student_class()``.
        """
        logger.info(f"Deleting student {student_key} from markbook {markbook_key}")

        await self.executor.execute(
            OperationDescriptor.read(
                APIAction.DELETE_STUDENT,
                StatusOnlyResponse,
                ("key", markbook_key),
                ("studentkey", student_key),
                ("sid", sid),
            )
        )

    async def create_class(
        self,
        markbook_key: int,
        name: str,
        teacher_family_name: str,
        teacher_given_name: str,
    ) -> CreateClassResponse:
        """
        Create a class in a markbook. The name must be unique in the markbook.

        Returns:
            Response carrying the new ``class_key``
        """
        logger.info(f"Creating class {name} in markbook {markbook_key}")

        return await self.executor.execute(
            OperationDescriptor.read(
                APIAction.CREATE_CLASS,
                CreateClassResponse,
                ("key", markbook_key),
                ("name", name),
                ("family", teacher_family_name),
                ("given", teacher_given_name),
            )
        )

    # -------------------------------------------------------------------------
    # Backups
    # -------------------------------------------------------------------------

    async def schedule_backup(self, matching: str) -> None:
        """
        Schedule a nightly backup of markbooks whose names contain ``matching``.

        The backup is produced at about 1 AM; fetch it the next day with
        ``get_backup_url()``. Only one backup can be scheduled per day, a
        second call replaces the first.

        Args:
            matching: Substring filter on markbook names, at least 2 characters

        Raises:
            MarkbookValidationError: If ``matching`` is too short. Nothing is
                sent to the server in that case.
        """
        if len(unicodedata.normalize("NFC", matching)) < MIN_BACKUP_MATCHING_LENGTH:
            raise MarkbookValidationError(
                f"The 'matching' parameter must be at least {MIN_BACKUP_MATCHING_LENGTH} characters."
            )

        logger.info(f"Scheduling backup of markbooks matching '{matching}'")

        await self.executor.execute(
            OperationDescriptor.read(
                APIAction.SCHEDULE_BACKUP, StatusOnlyResponse, ("matching", matching)
            )
        )

    async def get_backup_url(self) -> GetBackupURLResponse:
        """
        Return the download URL of the latest completed backup.

        The zip is deleted about an hour after the URL is first returned.

        Raises:
            MarkbookBackupPendingError: The backup has not been produced yet
            MarkbookNoBackupError: No backup has been scheduled
        """
        return await self.executor.execute(
            OperationDescriptor.read(APIAction.GET_BACKUP_URL, GetBackupURLResponse)
        )

    # -------------------------------------------------------------------------
    # Markbook creation (POST)
    # -------------------------------------------------------------------------

    async def create_markbook(self, request: CreateMarkbookRequest) -> CreateMarkbookResponse:
        """
        Create a markbook with its classes, students and share list.

        Args:
            request: The populated payload; class and student keys are local
                to the request and may start from 1

        Returns:
            Response with the new markbook key and the name actually used
        """
        logger.info(f"Creating markbook '{request.markbook_name}'")

        return await self.executor.execute(
            OperationDescriptor.write(APIAction.CREATE_MARKBOOK, CreateMarkbookResponse, request)
        )


# -----------------------------------------------------------------------------
# Convenience Functions
# -----------------------------------------------------------------------------


def create_client(
    settings: ClientSettings | None = None,
    config_file: str | Path | None = None,
    **kwargs,
) -> MarkbookClient:
    """
    Create a MarkbookClient from settings, a YAML file, or the environment.

    Args:
        settings: Explicit settings; takes precedence
        config_file: YAML file with a ``markbook:`` section
        **kwargs: Passed through to ``MarkbookClient``

    Returns:
        Configured MarkbookClient instance

    Raises:
        MarkbookConfigError: If required settings are missing
    """
    if settings is None:
        settings = ConfigLoader().load(config_file)
    return MarkbookClient.from_settings(settings, **kwargs)
