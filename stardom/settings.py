"""
Runtime configuration using pydantic-settings.
Loads from the environment / .env file. Game balance lives in stardom.config.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class OracleSettings(BaseSettings):
    """Narrative oracle (LLM) configuration. Default: offline, fallbacks only."""

    provider: str = Field(
        default="offline", description="offline | openai | anthropic"
    )
    model_name: str = Field(default="gpt-4o-mini")
    image_model: str = Field(default="gpt-image-1")
    api_key: str = Field(default="")
    base_url: Optional[str] = Field(
        default=None, description="Override the provider endpoint (OpenAI-compatible servers)"
    )
    temperature: float = Field(default=0.9)
    max_tokens: int = Field(default=512)
    timeout_seconds: float = Field(default=10.0)

    model_config = {"env_prefix": "ORACLE_", "env_file": ".env", "extra": "ignore"}


class StorageSettings(BaseSettings):
    """Save-game location."""

    directory: Path = Field(default=Path("saves"))
    key: str = Field(default="stardom_v1_save")

    model_config = {"env_prefix": "SAVE_", "env_file": ".env", "extra": "ignore"}


class LogSettings(BaseSettings):
    level: str = Field(default="INFO")
    directory: Path = Field(default=Path("logs"))
    file_name: str = Field(default="stardom.log")

    model_config = {"env_prefix": "LOG_", "env_file": ".env", "extra": "ignore"}


class Settings(BaseSettings):
    """Root settings aggregator."""

    oracle: OracleSettings = Field(default_factory=OracleSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LogSettings = Field(default_factory=LogSettings)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
