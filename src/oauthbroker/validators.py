"""Configuration validators for the authorization broker."""

import logging
import re
from typing import Any
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


class ConfigValidator:
    """Base class for configuration validators."""

    def validate(self, value: Any) -> Any:
        """Validate and normalize a configuration value.

        Args:
            value: Raw configuration value

        Returns:
            Validated and normalized value

        Raises:
            ValidationError: If validation fails
        """
        raise NotImplementedError


class IntegerValidator(ConfigValidator):
    """Validates integer values with optional min/max bounds."""

    def __init__(self, min_value: int = None, max_value: int = None):
        self.min_value = min_value
        self.max_value = max_value

    def validate(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValidationError(f"Must be an integer, got: {value}")

        try:
            int_value = int(value)
        except (ValueError, TypeError):
            raise ValidationError(f"Must be an integer, got: {value}")

        if self.min_value is not None and int_value < self.min_value:
            raise ValidationError(
                f"Must be at least {self.min_value}, got: {int_value}"
            )

        if self.max_value is not None and int_value > self.max_value:
            raise ValidationError(
                f"Must be at most {self.max_value}, got: {int_value}"
            )

        return int_value


class StringValidator(ConfigValidator):
    """Validates string values with optional constraints."""

    def __init__(self, max_length: int = None, allow_empty: bool = True):
        self.max_length = max_length
        self.allow_empty = allow_empty

    def validate(self, value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(f"Must be a string, got: {type(value)}")

        if not self.allow_empty and not value.strip():
            raise ValidationError("Cannot be empty")

        if self.max_length is not None and len(value) > self.max_length:
            raise ValidationError(
                f"Must be at most {self.max_length} characters, got: {len(value)}"
            )

        return value


class ColorValidator(ConfigValidator):
    """Validates a #RRGGBB colour."""

    PATTERN = re.compile(r'^#[0-9a-fA-F]{6}$')

    def validate(self, value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(f"Colour must be a string, got: {type(value)}")

        color = value.strip()
        if not self.PATTERN.match(color):
            raise ValidationError(f"Colour must look like #RRGGBB, got: {value}")

        return color.upper()


class UrlValidator(ConfigValidator):
    """Validates an absolute URL (any scheme, custom app schemes included)."""

    def validate(self, value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(f"URL must be a string, got: {type(value)}")

        url = value.strip()
        if not url:
            return ''

        parts = urlsplit(url)
        if not parts.scheme:
            raise ValidationError(f"URL must be absolute, got: {value}")

        if parts.scheme in ('http', 'https') and not parts.netloc:
            raise ValidationError(f"URL has no host: {value}")

        return url


class LogLevelValidator(ConfigValidator):
    """Validates log level."""

    VALID_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}

    def validate(self, value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(f"Log level must be a string, got: {type(value)}")

        level = value.upper()

        if level not in self.VALID_LEVELS:
            raise ValidationError(
                f"Invalid log level: {value}. Must be one of: {', '.join(sorted(self.VALID_LEVELS))}"
            )

        return level


# Registry of validators for known config keys
VALIDATORS = {
    'window_width': IntegerValidator(min_value=200, max_value=4096),
    'window_height': IntegerValidator(min_value=200, max_value=4096),
    'window_background': ColorValidator(),
    'window_title': StringValidator(max_length=200, allow_empty=False),
    'timeout': IntegerValidator(min_value=0, max_value=86400),  # 0 = wait forever
    'callback_url': UrlValidator(),
    'log_level': LogLevelValidator(),
}


def validate_config_value(key: str, value: Any) -> Any:
    """Validate a configuration value using registered validators.

    Args:
        key: Configuration key
        value: Value to validate

    Returns:
        Validated and normalized value

    Raises:
        ValidationError: If validation fails
    """
    if key in VALIDATORS:
        return VALIDATORS[key].validate(value)

    # Unknown keys pass through unchanged
    logger.debug(f"No validator for config key '{key}'")
    return value
