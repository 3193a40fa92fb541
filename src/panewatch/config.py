"""Configuration management for panewatch.

Handles default settings and per-pane overrides from panewatch.toml:

    [default]
    timeout = 300          # seconds, omit for no deadline
    max_retries = 3
    grace_period = 5.0     # seconds before a missing start marker triggers a resend
    capture_lines = 1000
    max_age_minutes = 60
    detect_shell = false
    detect_attempts = 50   # captures while waiting for detection output
    history_file = "~/.panewatch/history.jsonl"

    [pane."build:0.1"]
    timeout = 1800
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
import tomllib

from .types import Target

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "panewatch.toml"


@dataclass
class ExecutionConfig:
    """Resolved execution settings for one pane."""

    pane: Target
    timeout: Optional[float] = None
    max_retries: int = 3
    grace_period: float = 5.0
    capture_lines: int = 1000
    detect_shell: bool = False


def _find_config_file() -> Optional[Path]:
    """Find panewatch.toml in current or parent directories."""
    current = Path.cwd()

    for parent in [current] + list(current.parents):
        config_file = parent / CONFIG_FILENAME
        if config_file.exists():
            return config_file

    return None


def _load_config(path: Optional[Path] = None) -> dict:
    """Load raw configuration from file."""
    if path is None:
        path = _find_config_file()

    if path is None or not path.exists():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


_EXECUTION_KEYS = ("timeout", "max_retries", "grace_period", "capture_lines", "detect_shell")


class ConfigManager:
    """Manages configuration for panewatch."""

    def __init__(self, path: Optional[Path] = None, data: Optional[dict] = None):
        self._config_file = path if path is not None else _find_config_file()
        if data is not None:
            self.data = data
        else:
            try:
                self.data = _load_config(self._config_file)
            except tomllib.TOMLDecodeError as e:
                logger.warning(f"Ignoring invalid {self._config_file}: {e}")
                self.data = {}
        self._default_config = self.data.get("default", {})
        self._pane_configs: dict = self.data.get("pane", {})

    def get_execution_config(self, pane: Target) -> ExecutionConfig:
        """Get execution configuration for a pane.

        Checks pane overrides first, then falls back to defaults.
        """
        config = ExecutionConfig(pane=pane)

        for source in (self._default_config, self._pane_configs.get(pane, {})):
            for key in _EXECUTION_KEYS:
                if key in source:
                    setattr(config, key, source[key])

        return config

    @property
    def max_age_minutes(self) -> float:
        return self._default_config.get("max_age_minutes", 60)

    @property
    def history_file(self) -> Optional[str]:
        return self._default_config.get("history_file")

    @property
    def detect_attempts(self) -> int:
        return self._default_config.get("detect_attempts", 50)


# Global instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get or create the global config manager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_execution_config(pane: Target) -> ExecutionConfig:
    """Get execution configuration for a pane."""
    return get_config_manager().get_execution_config(pane)
