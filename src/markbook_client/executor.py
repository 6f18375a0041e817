"""Turns logical operations into authenticated wire requests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic

from .errors import MarkbookConfigError
from .models import APIAction
from .session import Credential, SessionManager
from .transport import R, Transport
from .utils.logging import get_logger

logger = get_logger(__name__)


class Verb(Enum):
    READ = "GET"
    WRITE = "POST"


@dataclass(frozen=True)
class OperationDescriptor(Generic[R]):
    """
    One logical call: an action, its ordered string parameters, an optional
    JSON body and the response shape to decode into.
    """

    action: APIAction
    verb: Verb
    shape: type[R]
    params: tuple[tuple[str, str], ...] = ()
    body: Any = None

    @classmethod
    def read(cls, action: APIAction, shape: type[R], *params: tuple[str, Any]) -> "OperationDescriptor[R]":
        """Build a GET operation. ``action=<name>`` always comes first."""
        items = (("action", action.value),) + tuple((name, _param(value)) for name, value in params)
        return cls(action=action, verb=Verb.READ, shape=shape, params=items)

    @classmethod
    def write(cls, action: APIAction, shape: type[R], body: Any) -> "OperationDescriptor[R]":
        """Build a POST operation whose body travels as JSON in ``jsondata``."""
        return cls(action=action, verb=Verb.WRITE, shape=shape, body=body)


def _param(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class RequestExecutor:
    """
    Executes operation descriptors with the current session credential.

    Usage:
        executor = RequestExecutor(transport, session, api_key, base_url)
        response = await executor.execute(
            OperationDescriptor.read(APIAction.MARKBOOK_LIST, MarkbookListResponse)
        )
    """

    POST_ENDPOINT = "post.lc"

    def __init__(self, transport: Transport, session: SessionManager, api_key: str, base_url: str):
        self.transport = transport
        self.session = session
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def execute(self, descriptor: OperationDescriptor[R]) -> R:
        """
        Run a single attempt of ``descriptor``.

        The credential is fetched right before the request is built, never
        reused from an earlier call.

        Raises:
            MarkbookAuthError: If a session could not be established
            MarkbookConfigError: If the request could not be constructed
            MarkbookTransportError: On transport failure or a non-2xx status
            MarkbookDecodeError: If the response does not match the shape
            MarkbookAPIError: If the response status is not ``OKAY``
        """
        # Encode first so a bad payload fails before any network activity
        jsondata = encode_body(descriptor.body) if descriptor.verb is Verb.WRITE else None

        credential = await self.session.valid_credential()

        logger.debug(f"Calling Markbook API: {descriptor.action.value}")

        if descriptor.verb is Verb.READ:
            return await self.transport.perform(
                "GET",
                self.base_url,
                descriptor.shape,
                params=self.query_params(descriptor, credential),
            )

        return await self.transport.perform(
            "POST",
            f"{self.base_url}/{self.POST_ENDPOINT}",
            descriptor.shape,
            form=self.form_fields(descriptor, credential, jsondata or ""),
        )

    def query_params(
        self, descriptor: OperationDescriptor[Any], credential: Credential
    ) -> list[tuple[str, str]]:
        """Operation parameters followed by the injected session parameters."""
        return [
            *descriptor.params,
            ("sessiontoken", credential.token),
            ("sessionkey", str(credential.key)),
            ("apikey", self.api_key),
        ]

    def form_fields(
        self, descriptor: OperationDescriptor[Any], credential: Credential, jsondata: str
    ) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "sessiontoken": credential.token,
            "sessionkey": str(credential.key),
            "apiaction": descriptor.action.value,
            "jsondata": jsondata,
        }


def encode_body(body: Any) -> str:
    """Serialize a write payload; objects with ``to_dict`` are converted first."""
    if hasattr(body, "to_dict"):
        body = body.to_dict()
    try:
        return json.dumps(body, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise MarkbookConfigError(f"Could not encode request body: {e}") from e
