"""
Configuration module.

Loads client settings from a YAML file or from ``MARKBOOK_*`` environment
variables (a ``.env`` file is honoured).
"""

from .loader import ConfigLoader
from .models import ClientSettings

__all__ = ["ClientSettings", "ConfigLoader"]
