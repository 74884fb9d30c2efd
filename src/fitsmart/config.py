"""Configuration settings for the FitSmart auditor."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


# __file__ = src/fitsmart/config.py -> .parent.parent.parent = project root
PROJECT_ROOT = Path(__file__).parent.parent.parent

MIB = 1024 * 1024

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Reasoning engine
    llm_provider: Literal["openai", "gemini"] = "openai"
    openai_api_key: str = ""
    gemini_api_key: str = ""

    # Model selection per stage (OpenAI)
    llm_model_fast: str = "gpt-4o-mini"  # Pre-analysis
    llm_model_smart: str = "gpt-4o"  # Deep analysis
    llm_model_vision: str = "gpt-4o"  # Video analysis

    # Model selection per stage (Gemini)
    gemini_model_fast: str = "gemini-2.5-flash"
    gemini_model_smart: str = "gemini-2.5-pro"
    gemini_model_vision: str = "gemini-2.5-flash"

    # Output budgets
    pre_analysis_max_tokens: int = 4096
    deep_analysis_max_tokens: int = 8192
    video_analysis_max_tokens: int = 8192
    deep_analysis_thinking_budget: int = 2048

    # Timeouts (seconds)
    pre_analysis_timeout: float = 60.0
    deep_analysis_timeout: float = 180.0
    video_analysis_timeout: float = 180.0

    # Every retry is user-initiated unless this is raised
    llm_max_retries: int = 0

    # Input bounds
    max_document_bytes: int = 10 * MIB  # image / pdf
    max_video_bytes: int = 20 * MIB

    # CSV history
    max_serialized_sessions: int = 5

    # Sessions
    locale: Literal["es", "en"] = "es"
    max_sessions: int = 500

    @property
    def active_api_key(self) -> str:
        """Credential for the selected provider."""
        if self.llm_provider == "gemini":
            return self.gemini_api_key
        return self.openai_api_key

    def stage_models(self) -> tuple[str, str, str]:
        """(fast, smart, vision) model names for the selected provider."""
        if self.llm_provider == "gemini":
            return self.gemini_model_fast, self.gemini_model_smart, self.gemini_model_vision
        return self.llm_model_fast, self.llm_model_smart, self.llm_model_vision


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def require_api_key(settings: Settings) -> None:
    """Abort startup when the reasoning engine credential is missing.

    Raises:
        SystemExit: If the key for the selected provider is not configured.
    """
    if not settings.active_api_key:
        env_name = "GEMINI_API_KEY" if settings.llm_provider == "gemini" else "OPENAI_API_KEY"
        logger.critical(
            f"{env_name} is required when llm_provider={settings.llm_provider}. "
            "Set it in the environment or in the .env file."
        )
        raise SystemExit(1)
    logger.info(f"Reasoning engine: {settings.llm_provider} (credential configured)")
