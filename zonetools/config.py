"""Configuration module for zonetools.

Reads configuration from environment variables with validation.
"""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional


class ConfigurationError(Exception):
    """Raised when a configuration value is invalid."""
    pass


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

TRUE_VALUES = ("true", "1", "yes")
FALSE_VALUES = ("false", "0", "no", "")


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Parser settings
    default_ttl: int = 86400
    max_include_depth: int = 16
    encoding: str = "utf-8"

    # Logging
    log_level: str = "WARNING"
    debug: bool = False

    # External tools
    checkzone_binary: str = "named-checkzone"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Optional environment variables:
        - ZONETOOLS_DEFAULT_TTL: TTL before any $TTL directive (default: 86400)
        - ZONETOOLS_MAX_INCLUDE_DEPTH: $INCLUDE nesting limit (default: 16)
        - ZONETOOLS_ENCODING: Zone file encoding (default: utf-8)
        - ZONETOOLS_LOG_LEVEL: Logging level name (default: WARNING)
        - ZONETOOLS_DEBUG: Enable debug logging (default: false)
        - ZONETOOLS_CHECKZONE: named-checkzone binary (default: named-checkzone)

        Returns:
            Config: Configuration object

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        log_level = os.environ.get("ZONETOOLS_LOG_LEVEL", "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid ZONETOOLS_LOG_LEVEL: {log_level} "
                f"(expected one of {', '.join(LOG_LEVELS)})"
            )

        checkzone_binary = os.environ.get("ZONETOOLS_CHECKZONE", "named-checkzone")
        if not checkzone_binary:
            raise ConfigurationError("ZONETOOLS_CHECKZONE cannot be empty")

        encoding = os.environ.get("ZONETOOLS_ENCODING", "utf-8")
        if not encoding:
            raise ConfigurationError("ZONETOOLS_ENCODING cannot be empty")

        return cls(
            default_ttl=cls._get_int("ZONETOOLS_DEFAULT_TTL", 86400, 0, 2 ** 32 - 1),
            max_include_depth=cls._get_int("ZONETOOLS_MAX_INCLUDE_DEPTH", 16, 1),
            encoding=encoding,
            log_level=log_level,
            debug=cls._get_bool("ZONETOOLS_DEBUG"),
            checkzone_binary=checkzone_binary,
        )

    @staticmethod
    def _get_int(key: str, default: int, minimum: int,
                 maximum: Optional[int] = None) -> int:
        """Read an integer environment variable within bounds.

        Raises:
            ConfigurationError: If the value is not an integer or out of range
        """
        raw = os.environ.get(key)
        if raw is None or raw == "":
            return default
        try:
            value = int(raw)
        except ValueError as e:
            raise ConfigurationError(f"Invalid {key}: {raw!r} is not an integer") from e
        if value < minimum or (maximum is not None and value > maximum):
            raise ConfigurationError(f"Invalid {key}: {value} is out of range")
        return value

    @staticmethod
    def _get_bool(key: str) -> bool:
        raw = os.environ.get(key, "").lower()
        if raw in TRUE_VALUES:
            return True
        if raw in FALSE_VALUES:
            return False
        raise ConfigurationError(f"Invalid {key}: {raw!r} is not a boolean")

    @property
    def effective_log_level(self) -> int:
        """Logging level number; debug mode forces DEBUG."""
        if self.debug:
            return logging.DEBUG
        return getattr(logging, self.log_level)

    def parser_options(self) -> Dict[str, Any]:
        """Keyword arguments for ZoneParser."""
        return {
            "default_ttl": self.default_ttl,
            "max_include_depth": self.max_include_depth,
            "encoding": self.encoding,
        }
