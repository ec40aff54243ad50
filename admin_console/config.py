from __future__ import annotations

import os
from dataclasses import dataclass

# Defaults match the order-management service used in development.
DEFAULT_API_BASE = "http://localhost:3001"
DEFAULT_TIMEOUT_SECONDS = 8.0


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the console, read from environment variables."""
    api_base: str = DEFAULT_API_BASE
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "WARNING"
    devserver_host: str = "127.0.0.1"
    devserver_port: int = 3001

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_base=os.getenv("ORDER_API_BASE", DEFAULT_API_BASE).rstrip("/"),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))),
            log_level=os.getenv("LOG_LEVEL", "WARNING").upper(),
            devserver_host=os.getenv("DEVSERVER_HOST", "127.0.0.1"),
            devserver_port=int(os.getenv("DEVSERVER_PORT", "3001")),
        )
