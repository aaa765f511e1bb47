"""Configuration management for taskhooks."""

import logging
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "TaskManager-Webhook/1.0"


class Settings(BaseSettings):
    """taskhooks configuration loaded from environment variables.

    All settings can be overridden via environment variables with
    the TASKHOOKS_ prefix. For example:
        TASKHOOKS_MAX_ATTEMPTS=5
        TASKHOOKS_REQUEST_TIMEOUT_SECONDS=10
    """

    # Environment
    env: Literal["development", "production", "test"] = Field(
        default="development",
        description="Environment: development, production, or test",
    )

    # Delivery
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total delivery attempts per (event, subscription), first attempt included",
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0.0,
        le=300.0,
        description="Deadline for a single HTTP attempt",
    )
    backoff_base_seconds: float = Field(
        default=2.0,
        gt=0.0,
        le=60.0,
        description="Backoff base; the delay after attempt n is base ** n seconds",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent sent with every webhook request",
    )
    max_response_body_chars: int = Field(
        default=1000,
        ge=0,
        le=100_000,
        description="Response body characters kept on delivery records",
    )
    delivery_log_size: int = Field(
        default=1000,
        ge=1,
        le=1_000_000,
        description="Maximum delivery results kept by the in-memory delivery log",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format",
    )

    model_config = {
        "env_prefix": "TASKHOOKS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @model_validator(mode="after")
    def validate_delivery_settings(self) -> "Settings":
        """Validate delivery settings based on environment.

        Receivers commonly filter on the User-Agent, so production must
        always send one. A backoff base below 1 would make delays shrink.
        """
        if not self.user_agent.strip():
            if self.env == "production":
                raise ValueError("TASKHOOKS_USER_AGENT must not be empty in production")
            logger.warning("Empty user agent configured, falling back to %s", DEFAULT_USER_AGENT)
            object.__setattr__(self, "user_agent", DEFAULT_USER_AGENT)

        if self.backoff_base_seconds < 1.0:
            raise ValueError(
                f"backoff_base_seconds ({self.backoff_base_seconds}) must be >= 1.0 "
                "so that retry delays grow with each attempt."
            )
        return self


# Global settings instance
settings = Settings()
