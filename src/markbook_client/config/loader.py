"""Configuration loader for client settings."""

from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from ..errors import MarkbookConfigError
from .models import ClientSettings

SECTION = "markbook"


class ConfigLoader:
    """Loads client settings from YAML, falling back to the environment."""

    def __init__(self, config_dir: Path | None = None):
        """Initialize the config loader.

        Args:
            config_dir: Directory relative config paths are resolved against.
                Defaults to the current working directory.
        """
        self.config_dir = config_dir or Path.cwd()

    def load(self, config_file: str | Path | None = None) -> ClientSettings:
        """Load settings from ``config_file``, or from the environment if omitted.

        Args:
            config_file: Path to a YAML file with a ``markbook:`` section

        Returns:
            Parsed ClientSettings
        """
        if config_file is None:
            return self.load_env()
        return self.load_file(config_file)

    def load_file(self, config_file: str | Path) -> ClientSettings:
        path = self._resolve_path(config_file)
        data = self._load_yaml(path)

        section = data.get(SECTION)
        if not isinstance(section, dict):
            raise MarkbookConfigError(f"No '{SECTION}' section in {path}")
        return ClientSettings.from_dict(section)

    def load_env(self) -> ClientSettings:
        # .env values never override variables already set
        load_dotenv()
        return ClientSettings.from_env()

    def _resolve_path(self, file_path: str | Path) -> Path:
        """Resolve a config file path."""
        path = Path(file_path).expanduser()
        if not path.is_absolute():
            path = self.config_dir / path
        return path

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load and parse a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise MarkbookConfigError(f"Config file is not a mapping: {path}")
        return data
