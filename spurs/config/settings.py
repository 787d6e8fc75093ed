"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Connections
    connect_timeout: int = field(default=10)
    reconnect_interval: int = field(default=5)
    default_key: str | None = field(default=None)
    known_hosts: str | None = field(default=None)
    strict_host_key_checking: bool = field(default=True)

    # Output capture
    max_output: int = field(default=16 * 1_048_576)  # 16MB per stream

    # Transport
    transport: str = field(default="http")
    http_host: str = field(default="127.0.0.1")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from SPURS_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            connect_timeout=cls._get_int("SPURS_CONNECT_TIMEOUT", 10),
            reconnect_interval=cls._get_int("SPURS_RECONNECT_INTERVAL", 5),
            default_key=os.getenv("SPURS_DEFAULT_KEY") or None,
            known_hosts=os.getenv("SPURS_KNOWN_HOSTS") or None,
            strict_host_key_checking=cls._get_bool("SPURS_STRICT_HOST_KEY_CHECKING", True),
            max_output=cls._get_int("SPURS_MAX_OUTPUT", 16 * 1_048_576),
            transport=cls._get_transport(),
            http_host=os.getenv("SPURS_HTTP_HOST", "127.0.0.1"),
            http_port=cls._get_int("SPURS_HTTP_PORT", 8000),
            log_level=os.getenv("SPURS_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("SPURS_LOG_COLORS", True),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_transport() -> str:
        """Get transport from environment with validation.

        Returns:
            Transport type ("http" or "stdio")
        """
        transport = os.getenv("SPURS_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "http"
