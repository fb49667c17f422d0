"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name
    (API_BASE, WEBHOOK_SECRET, ...).
    """

    # Relay target
    api_base: str = ""
    webhook_secret: str = ""
    webhook_payload_mode: Literal["raw", "json"] = "raw"
    webhook_timeout_seconds: float = 10.0

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Processing limits
    max_email_size_mb: int = 25
    max_mime_depth: int = 20

    # Transfer decoding strategy: "heuristic" | "declared"
    transfer_decoding: Literal["heuristic", "declared"] = "heuristic"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @property
    def relay_configured(self) -> bool:
        """True when both the API base and the shared secret are set."""
        return bool(self.api_base and self.webhook_secret)


# Global settings instance
settings = Settings()
