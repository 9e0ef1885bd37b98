# src/mdlinkcheck/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Iterable, Optional

from mdlinkcheck.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    A singleton class to manage the checker configuration.
    It loads settings from the packaged settings.json and allows for in-memory overrides.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self._config: Dict[str, Any] = {}
        self.reset()
        logger.debug("ConfigManager initialized.")

    def get_all(self) -> Dict[str, Any]:
        """Returns the entire current configuration dictionary."""
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Safely retrieves a nested value from the configuration.
        e.g., 'link_checker.timeout_ms'.
        """
        keys = key_path.split('.')
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
        return value if value is not None else default

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Sets a nested value in the in-memory configuration.
        e.g., 'debug.level', 'INFO'
        """
        keys = key_path.split('.')
        d = self._config
        for key in keys[:-1]:
            d = d.setdefault(key, {})
            if not isinstance(d, dict):
                logger.error("Cannot set value: '%s' is not a dictionary.", key)
                return False

        # Cast to the type of the value being replaced
        original_value = d.get(keys[-1])
        if isinstance(original_value, list) and isinstance(value, str):
            value = [item.strip() for item in value.split(",") if item.strip()]
        elif original_value is not None and not isinstance(original_value, (dict, list)):
            try:
                if isinstance(original_value, bool) and isinstance(value, str):
                    value = value.strip().lower() in ("1", "true", "yes", "on")
                else:
                    value = type(original_value)(value)
            except (ValueError, TypeError):
                logger.warning(
                    "Could not cast new value for '%s' to type %s. Storing as string.",
                    key_path, type(original_value).__name__
                )

        d[keys[-1]] = value
        logger.debug("Configuration updated: %s = %s", key_path, value)
        return True

    def apply_overrides(self, pairs: Iterable[str]) -> None:
        """
        Applies 'key.path=value' strings from the command line.
        Raises ValueError for a malformed pair or a key that cannot be set.
        """
        for pair in pairs or []:
            key_path, sep, value = pair.partition("=")
            key_path = key_path.strip()
            if not sep or not key_path:
                raise ValueError(f"Invalid override {pair!r}, expected KEY=VALUE")
            if not self.set_nested(key_path, value.strip()):
                raise ValueError(f"Cannot override {key_path!r}")

    def reset(self):
        """Resets the in-memory configuration from the settings.json file."""
        try:
            config_path = PathUtils.get_settings_file()
            if not config_path.exists():
                logger.warning("settings.json not found at %s. Using empty config.", config_path)
                self._config = {}
                return
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = json.load(f)
            logger.debug("Configuration has been (re)loaded from settings.json.")
        except (OSError, ValueError) as e:
            logger.error("Failed to load settings.json: %s", e, exc_info=True)
            self._config = {}


# The global singleton instance used by the handlers.
config_manager = ConfigManager()
