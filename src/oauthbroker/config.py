#!/usr/bin/env python3
"""Configuration management for the authorization broker.

config.json contains:

{
  "window_width": 450,            // Sign-in window width in pixels
  "window_height": 330,           // Sign-in window height in pixels
  "window_background": "#3F51B5", // Colour shown while the page loads
  "window_title": "Sign In",
  "timeout": 0,                   // Seconds before the window closes itself (0 = never)
  "callback_url": "",             // Default redirect URI for the CLI
  "log_level": "INFO"
}
"""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

from .validators import validate_config_value, ValidationError

logger = logging.getLogger(__name__)


class Config:
    """Manages broker configuration."""

    DEFAULT_CONFIG_DIR = Path.home() / ".config" / "oauthbroker"
    CONFIG_FILE = "config.json"
    LOG_FILE = "oauthbroker.log"

    DEFAULTS: Dict[str, Any] = {
        'window_width': 450,
        'window_height': 330,
        'window_background': '#3F51B5',
        'window_title': 'Sign In',
        'timeout': 0,
        'callback_url': '',
        'log_level': 'INFO',
    }

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_dir: Custom configuration directory path
        """
        self.config_dir = config_dir or self.DEFAULT_CONFIG_DIR
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_path = self.config_dir / self.CONFIG_FILE
        self.log_path = self.config_dir / self.LOG_FILE

        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file."""
        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                self._config = json.load(f)
            logger.debug(f"Loaded config from {self.config_path}")
        else:
            self._config = dict(self.DEFAULTS)
            self.save()
            logger.debug(f"Created default config at {self.config_path}")

    def save(self) -> None:
        """Save configuration to file."""
        with open(self.config_path, 'w') as f:
            json.dump(self._config, f, indent=2)
        # Owner read/write only
        self.config_path.chmod(0o600)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value with validation.

        Args:
            key: Configuration key
            value: Configuration value

        Raises:
            ValueError: If value is invalid for the given key
        """
        try:
            validated_value = validate_config_value(key, value)
        except ValidationError as e:
            raise ValueError(str(e))
        self._config[key] = validated_value
        self.save()

    def items(self) -> Dict[str, Any]:
        """Get all settings, defaults filled in."""
        merged = dict(self.DEFAULTS)
        merged.update(self._config)
        return merged

    def _get_default(self, key: str) -> Any:
        return self._config.get(key, self.DEFAULTS[key])

    @property
    def window_width(self) -> int:
        """Get sign-in window width."""
        return self._get_default('window_width')

    @property
    def window_height(self) -> int:
        """Get sign-in window height."""
        return self._get_default('window_height')

    @property
    def window_background(self) -> str:
        """Get sign-in window background colour."""
        return self._get_default('window_background')

    @property
    def window_title(self) -> str:
        """Get sign-in window title."""
        return self._get_default('window_title')

    @property
    def timeout(self) -> int:
        """Get sign-in timeout in seconds (0 means no timeout)."""
        return self._get_default('timeout')

    @property
    def callback_url(self) -> str:
        """Get default callback URL."""
        return self._get_default('callback_url')

    @property
    def log_level(self) -> str:
        """Get log level."""
        return self._get_default('log_level').upper()


def window_settings(config: Optional[Config] = None) -> Dict[str, Any]:
    """Resolve sign-in window appearance and timeout.

    Args:
        config: Config to read from, or None for the built-in defaults

    Returns:
        Dict with 'width', 'height', 'background', 'title' and 'timeout'
    """
    if config is None:
        values = Config.DEFAULTS
        return {
            'width': values['window_width'],
            'height': values['window_height'],
            'background': values['window_background'],
            'title': values['window_title'],
            'timeout': values['timeout'],
        }

    return {
        'width': config.window_width,
        'height': config.window_height,
        'background': config.window_background,
        'title': config.window_title,
        'timeout': config.timeout,
    }
