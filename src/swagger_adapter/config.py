"""Configuration for the Swagger API adapter."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TIMEOUT_MS = 10000


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    service_name: str = Field(default="swagger-api-adapter")

    adapter_transport: str = Field(default="streamable-http")
    adapter_host: str = Field(default="0.0.0.0")
    adapter_port: int = Field(default=8000)
    adapter_auth_token: Optional[str] = Field(default=None)

    adapter_default_timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS)
    adapter_strict_path_parameters: bool = Field(default=False)

    adapter_log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
