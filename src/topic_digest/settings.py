from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_CACHE_TTL_SECONDS = 600


class DigestSettings(BaseSettings):
    """Runtime configuration for Topic Digest.

    Variables are read without a prefix so the provider names line up with
    what their own tooling expects (X_BEARER_TOKEN, OPENAI_API_KEY, ...).
    """

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    # --- Credentials ---
    x_bearer_token: str | None = None
    openai_api_key: str | None = None

    # --- Providers ---
    x_api_base_url: str = "https://api.x.com/2"
    openai_api_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    openai_moderation_model: str = "omni-moderation-latest"
    summarizer_backend: Literal["extractive", "llm"] = "extractive"

    # --- Cache ---
    cache_ttl_seconds: int = Field(default=DEFAULT_CACHE_TTL_SECONDS)
    cache_max_entries: int = Field(default=1024, ge=1)

    # --- HTTP ---
    bind_host: str = "0.0.0.0"
    port: int = 8080

    # --- Logging ---
    log_level: str = Field(default="INFO", description="Python logging level")

    @field_validator("cache_ttl_seconds", mode="before")
    @classmethod
    def _ttl_or_default(cls, v):
        if v is None or v == "":
            return DEFAULT_CACHE_TTL_SECONDS
        try:
            return int(v)
        except (TypeError, ValueError):
            return DEFAULT_CACHE_TTL_SECONDS

    def require_credentials(self) -> None:
        if not (self.x_bearer_token or "").strip():
            raise ConfigurationError("Missing X_BEARER_TOKEN")
        if not (self.openai_api_key or "").strip():
            raise ConfigurationError("Missing OPENAI_API_KEY")

    @property
    def model_label(self) -> str:
        return self.openai_model if self.summarizer_backend == "llm" else "extractive"


settings = DigestSettings()
