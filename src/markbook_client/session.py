"""
Session lifecycle for the Markbook Online API.

A session token and key are obtained by posting the account password to
``authenticate.lc``. The server expires them after 20 minutes; the client
treats them as stale one minute earlier so a request never races the
server-side expiry.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable

from .classifier import wrap_authentication_failure
from .errors import MarkbookError
from .models import AuthenticationResponse
from .transport import Transport
from .utils.logging import get_logger

logger = get_logger(__name__)

# Upstream lifetime is 20 minutes; renew after 19
SESSION_LIFETIME = 19 * 60

Clock = Callable[[], float]


@dataclass(frozen=True)
class Account:
    """Long-lived account details supplied when the client is created."""

    api_key: str
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Credential:
    """A session token/key pair and the moment it was issued."""

    token: str = field(repr=False)
    key: int = field(repr=False)
    issued_at: float

    def age(self, now: float) -> float:
        return now - self.issued_at


class CredentialStore:
    """Holds the current credential. No I/O."""

    def __init__(self) -> None:
        self._credential: Credential | None = None

    def current(self) -> Credential | None:
        return self._credential

    def replace(self, credential: Credential) -> None:
        self._credential = credential

    def clear(self) -> None:
        self._credential = None

    def is_expired(self, now: float, lifetime: float) -> bool:
        """An absent credential counts as expired."""
        if self._credential is None:
            return True
        return self._credential.age(now) >= lifetime


class Authenticator:
    """Exchanges the account password for a session credential."""

    ENDPOINT = "authenticate.lc"

    def __init__(self, transport: Transport, base_url: str, clock: Clock = time.monotonic):
        self.transport = transport
        self.base_url = base_url.rstrip("/")
        self.clock = clock

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.ENDPOINT}"

    async def authenticate(self, account: Account) -> Credential:
        """
        Perform the authentication handshake.

        Args:
            account: The account to log in with

        Returns:
            A fresh credential stamped with the current clock value

        Raises:
            MarkbookAuthError: Wrapping whatever went wrong, including
                transport and decode failures
        """
        logger.info(f"Authenticating as {account.username}")

        try:
            response = await self.transport.perform(
                "POST",
                self.url,
                AuthenticationResponse,
                form={"apiuser": account.username, "apipassword": account.password},
            )
        except Exception as e:
            raise wrap_authentication_failure(e) from e

        return Credential(
            token=response.session_token,
            key=response.session_key,
            issued_at=self.clock(),
        )


class SessionManager:
    """
    Hands out a currently valid credential, renewing it when stale.

    Renewal is coalesced: when several tasks find the cache stale at the same
    time, the first one registers a renewal task in the in-flight slot and
    every other caller awaits that same task. N concurrent callers therefore
    cause at most one authentication call, and all of them observe its
    outcome.
    """

    def __init__(
        self,
        account: Account,
        authenticator: Authenticator,
        store: CredentialStore | None = None,
        lifetime: float = SESSION_LIFETIME,
        clock: Clock = time.monotonic,
    ):
        self.account = account
        self.authenticator = authenticator
        self.store = store or CredentialStore()
        self.lifetime = lifetime
        self.clock = clock
        self._renewal: asyncio.Task[Credential] | None = None

    @property
    def renewing(self) -> bool:
        """Whether an authentication call is currently in flight."""
        return self._renewal is not None

    async def valid_credential(self) -> Credential:
        """Return the cached credential, or renew it if absent or stale."""
        credential = self.store.current()
        if credential is not None and not self.store.is_expired(self.clock(), self.lifetime):
            return credential
        return await self._join_renewal()

    async def refresh(self) -> Credential:
        """Force a new session, joining a renewal already in flight."""
        return await self._join_renewal()

    def invalidate(self) -> None:
        """Forget the cached credential; the next call authenticates again."""
        self.store.clear()

    async def _join_renewal(self) -> Credential:
        # No await between the check and the registration, so this is atomic
        # with respect to other tasks on the event loop.
        if self._renewal is None:
            self._renewal = asyncio.ensure_future(self._renew())
            self._renewal.add_done_callback(self._renewal_finished)
        # Shielded so one caller being cancelled does not abort the handshake
        # the others are waiting on.
        return await asyncio.shield(self._renewal)

    async def _renew(self) -> Credential:
        if self.store.current() is not None:
            logger.info("Session expired, re-authenticating")
        try:
            credential = await self.authenticator.authenticate(self.account)
        except MarkbookError:
            self.store.clear()
            raise
        self.store.replace(credential)
        logger.debug("Session established")
        return credential

    def _renewal_finished(self, task: asyncio.Task[Credential]) -> None:
        if self._renewal is task:
            self._renewal = None
        # Waiters re-raise the error themselves; mark it retrieved so an
        # all-cancelled set of waiters does not leave an unobserved exception.
        if not task.cancelled():
            task.exception()
