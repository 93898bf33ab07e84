"""
In-package access to the settings defined in the top-level `config/` package.
"""

from __future__ import annotations

from config.settings import ConfigError as ConfigError
from config.settings import Settings as Settings
from config.settings import get_settings as get_settings
