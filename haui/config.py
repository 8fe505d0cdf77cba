"""Configuration management for the client."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from haui.constants import (
    DEFAULT_ENDPOINT,
    DEFAULT_LANGUAGE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TIMEOUT_S,
)

# Load environment variables
load_dotenv()


@dataclass
class ClientConfig:
    """Backend endpoint and client-side settings."""
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT_S
    language: str = DEFAULT_LANGUAGE
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load configuration from HAUI_* environment variables."""
        raw_timeout = os.getenv("HAUI_TIMEOUT", str(DEFAULT_TIMEOUT_S))
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(
                f"Invalid HAUI_TIMEOUT {raw_timeout!r}: expected a number of seconds"
            ) from None
        if timeout <= 0:
            raise ValueError(f"Invalid HAUI_TIMEOUT {raw_timeout!r}: must be positive")

        return cls(
            endpoint=os.getenv("HAUI_ENDPOINT", DEFAULT_ENDPOINT).rstrip("/"),
            timeout=timeout,
            language=os.getenv("HAUI_LANGUAGE", DEFAULT_LANGUAGE),
            log_level=os.getenv("HAUI_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )


# Global configuration instance
config: Optional[ClientConfig] = None


def get_config() -> ClientConfig:
    """Get the global configuration instance."""
    global config
    if config is None:
        config = ClientConfig.from_env()
    return config
