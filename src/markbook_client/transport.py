"""HTTP transport for the Markbook Online API."""

from __future__ import annotations

import json
from typing import Any, Protocol, TypeVar

import httpx

from .classifier import classify_http_status, classify_status, classify_transport_failure
from .errors import MarkbookDecodeError
from .models import APIStatus
from .utils.logging import get_logger

logger = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class ResponseShape(Protocol):
    """Anything that decodes itself from a JSON object and carries a status."""

    status: APIStatus

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Any: ...


R = TypeVar("R", bound=ResponseShape)


class Transport:
    """
    Sends one request and turns the reply into a typed response.

    Wraps a single ``httpx.AsyncClient``. Pass ``transport`` (for example an
    ``httpx.MockTransport``) or a ready-made ``http_client`` to run without a
    real network.
    """

    # Request timeout in seconds
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._transport = transport
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                verify=self.verify_ssl,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def perform(
        self,
        method: str,
        url: str,
        shape: type[R],
        *,
        params: list[tuple[str, str]] | None = None,
        form: dict[str, str] | None = None,
    ) -> R:
        """
        Send a request and decode the response into ``shape``.

        Args:
            method: HTTP method ("GET" or "POST")
            url: Absolute request URL
            shape: Response class to decode into
            params: Ordered query parameters
            form: Form fields, sent url-encoded

        Returns:
            The decoded response, whose status is ``OKAY``

        Raises:
            MarkbookConfigError: If the request could not be constructed
            MarkbookTransportError: On transport failure or a non-2xx status
            MarkbookDecodeError: If the body does not match ``shape``
            MarkbookAPIError: If the envelope status is not ``OKAY``
        """
        headers = {"Content-Type": FORM_CONTENT_TYPE} if form is not None else None

        try:
            request = self.client.build_request(
                method, url, params=params, data=form, headers=headers
            )
        except httpx.InvalidURL as e:
            raise classify_transport_failure(e) from e

        logger.debug(f"{method} {url}")

        try:
            response = await self.client.send(request)
        except httpx.RequestError as e:
            raise classify_transport_failure(e) from e

        # Never decode the body of a failed HTTP exchange
        http_error = classify_http_status(response.status_code)
        if http_error is not None:
            raise http_error

        decoded = self.decode(response.content, shape)

        api_error = classify_status(decoded.status)
        if api_error is not None:
            raise api_error

        return decoded

    @staticmethod
    def decode(body: bytes, shape: type[R]) -> R:
        """Decode a JSON body into ``shape``; any mismatch is fatal."""
        try:
            data = json.loads(body)
            return shape.from_api_response(data)
        except (ValueError, KeyError, TypeError, RecursionError) as e:
            raise MarkbookDecodeError(
                f"Could not decode {shape.__name__}: {e}"
            ) from e
