"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DASHSCOPE_COMPATIBLE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
_PLACEHOLDER_KEYS = {"", "placeholder"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    dashscope_api_key: str | None = None
    provider_base_url: str = DASHSCOPE_COMPATIBLE_URL
    provider_model: str = "qwen-vl-plus"
    calorie_snap_mock_provider: bool = False
    host: str = "0.0.0.0"
    port: int = 3001
    recognition_endpoint: str = "http://localhost:3001/api/image/analyze"
    connectivity_check: bool = True
    connectivity_host: str | None = None
    connectivity_port: int | None = None
    records_dir: Path = Path.home() / ".calorie_snap"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def api_key_configured(self) -> bool:
        """Return True when a usable provider key is present."""
        return is_usable_api_key(self.dashscope_api_key)

    @property
    def is_production(self) -> bool:
        """Return True when running in production."""
        return self.environment == "production"


def is_usable_api_key(raw: str | None) -> bool:
    """Reject missing keys and the placeholder value shipped in sample env files."""
    if raw is None:
        return False
    return raw.strip() not in _PLACEHOLDER_KEYS
