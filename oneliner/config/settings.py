"""
Settings management for OneLiner.

This module provides functions to manage application settings,
including loading and accessing configuration values.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from oneliner.config.providers import DEFAULT_PROVIDER
from oneliner.utils import platform_utils

logger = logging.getLogger(__name__)

SAFETY_MODES = ("background", "inline", "off")


class Settings:
    """
    Settings manager for OneLiner.

    This class handles loading and accessing application settings.
    """

    # Default settings
    DEFAULT_SETTINGS = {
        "api": {
            "provider": DEFAULT_PROVIDER.name,
            "model": DEFAULT_PROVIDER.default_model,
            "api_key": "",
            "max_tokens": 2048,
        },
        "generation": {
            "option_count": 3,
        },
        "safety": {
            "mode": "background",
        },
        "output": {
            "mode": "clipboard",
        },
        "advanced": {
            "debug_mode": False,
            "log_level": "ERROR",
            "log_file": "",
        },
    }

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the settings manager.

        Args:
            config_dir (Optional[Path]): Override for the configuration
                directory, mainly for tests.
        """
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.config_dir = Path(config_dir) if config_dir else self._get_config_dir()
        self.config_file = self.config_dir / "settings.json"
        self.load_error: Optional[str] = None

        if self.config_file.exists():
            self.load()

    def _get_config_dir(self) -> Path:
        """
        Get the configuration directory for the application.

        Returns:
            Path: Path to the configuration directory.
        """
        if platform_utils.is_windows():
            # Windows: %APPDATA%\OneLiner
            return Path(os.environ.get("APPDATA", "")) / "OneLiner"

        elif platform_utils.is_macos():
            # macOS: ~/Library/Application Support/OneLiner
            return Path.home() / "Library" / "Application Support" / "OneLiner"

        else:
            # Linux/Unix: ~/.config/oneliner
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
            if xdg_config_home:
                return Path(xdg_config_home) / "oneliner"
            else:
                return Path.home() / ".config" / "oneliner"

    def load(self) -> bool:
        """
        Load settings from the configuration file.

        A file that exists but cannot be read is remembered in
        ``load_error`` so the CLI can refuse to start.

        Returns:
            bool: True if successful, False otherwise.
        """
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                loaded_settings = json.load(f)

            if not isinstance(loaded_settings, dict):
                raise ValueError("top-level value must be an object")

            self._update_nested_dict(self.settings, loaded_settings)
            self.load_error = None
            return True

        except (json.JSONDecodeError, ValueError, OSError) as e:
            self.load_error = f"{self.config_file}: {e}"
            logger.error(f"Error loading settings: {self.load_error}")
            return False

    def _update_nested_dict(self, target: Dict, source: Dict) -> None:
        """
        Update a nested dictionary with values from another dictionary.

        Args:
            target (Dict): Target dictionary to update.
            source (Dict): Source dictionary with new values.
        """
        for key, value in source.items():
            if (
                key in target
                and isinstance(target[key], dict)
                and isinstance(value, dict)
            ):
                self._update_nested_dict(target[key], value)
            else:
                target[key] = value

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a setting value.

        Args:
            section (str): Settings section.
            key (str): Setting key.
            default (Any): Default value if not found.

        Returns:
            Any: Setting value or default.
        """
        try:
            return self.settings[section][key]
        except (KeyError, TypeError):
            return default

    def set(self, section: str, key: str, value: Any) -> None:
        """
        Set a setting value.

        Args:
            section (str): Settings section.
            key (str): Setting key.
            value (Any): Setting value.
        """
        self.settings.setdefault(section, {})[key] = value

    def get_option_count(self) -> int:
        """Number of options to request, never below one."""
        try:
            return max(1, int(self.get("generation", "option_count", 3)))
        except (TypeError, ValueError):
            return 3

    def get_safety_mode(self) -> str:
        """Safety pass mode; unknown values fall back to background."""
        mode = str(self.get("safety", "mode", "background")).lower()
        return mode if mode in SAFETY_MODES else "background"

    def get_log_file_path(self) -> Optional[Path]:
        """
        Get the path to the log file.

        Returns:
            Optional[Path]: Path to the log file, or None if not set.
        """
        log_file = self.get("advanced", "log_file", "")

        if log_file:
            return Path(log_file)
        elif self.get("advanced", "debug_mode", False):
            # Default log file in config directory if debug mode is enabled
            return self.config_dir / "oneliner.log"
        else:
            return None


# Global settings instance
settings = Settings()
