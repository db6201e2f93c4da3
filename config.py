# config.py
"""Configuration settings for the Promptline execution pipeline.
Uses Pydantic BaseSettings for automatic environment variable loading.
"""

from __future__ import annotations

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class PromptlineSettings(BaseSettings):
    """Full configuration for Promptline."""

    # Backend credentials and endpoints
    OPENAI_API_KEY: str = ""
    OPENAI_API_BASE: str = "https://api.openai.com/v1"
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_API_BASE: str = "https://api.anthropic.com/v1"
    ANTHROPIC_VERSION: str = "2023-06-01"
    # Anthropic requires max_tokens on every request
    ANTHROPIC_DEFAULT_MAX_TOKENS: int = 500

    HTTPX_TIMEOUT: float = 600.0

    # Batch execution
    DEFAULT_CONCURRENCY: int = 4

    # Execution record storage
    PROMPT_VERSIONS_DIR: str = "./prompt-versions"

    # Logging
    LOG_LEVEL_STR: str = Field("INFO", alias="PROMPTLINE_LOG_LEVEL")
    LOG_FORMAT: str = (
        "%(asctime)s - %(levelname)s - [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
    )
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    LOG_FILE: str | None = None
    ENABLE_RICH_LOGGING: bool = True

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", populate_by_name=True, extra="ignore"
    )


settings = PromptlineSettings()
