"""Configuration data models."""

import os
from dataclasses import dataclass
from typing import Any, Mapping

from ..errors import MarkbookConfigError
from ..models import DEFAULT_BASE_URL
from ..transport import Transport

ENV_PREFIX = "MARKBOOK_"

REQUIRED_KEYS = ("api_key", "username", "password")


@dataclass
class ClientSettings:
    """Connection settings for one Markbook Online account."""

    api_key: str
    username: str
    password: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Transport.DEFAULT_TIMEOUT
    verify_ssl: bool = True

    def __repr__(self) -> str:
        return (
            f"ClientSettings(username={self.username!r}, base_url={self.base_url!r}, "
            f"timeout={self.timeout!r}, verify_ssl={self.verify_ssl!r})"
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClientSettings":
        missing = [key for key in REQUIRED_KEYS if not data.get(key)]
        if missing:
            raise MarkbookConfigError(f"Missing Markbook settings: {', '.join(missing)}")

        try:
            timeout = float(data.get("timeout", Transport.DEFAULT_TIMEOUT))
        except (TypeError, ValueError) as e:
            raise MarkbookConfigError(f"Invalid timeout: {data.get('timeout')!r}") from e

        return cls(
            api_key=str(data["api_key"]),
            username=str(data["username"]),
            password=str(data["password"]),
            base_url=str(data.get("base_url") or DEFAULT_BASE_URL),
            timeout=timeout,
            verify_ssl=_as_bool(data.get("verify_ssl", True)),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientSettings":
        """Build settings from ``MARKBOOK_API_KEY``, ``MARKBOOK_USERNAME`` and friends."""
        environ = os.environ if environ is None else environ
        data = {
            key[len(ENV_PREFIX):].lower(): value
            for key, value in environ.items()
            if key.startswith(ENV_PREFIX)
        }
        return cls.from_dict(data)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("0", "false", "no", "off", "")
    return bool(value)
