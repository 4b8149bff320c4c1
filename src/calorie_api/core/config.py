"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI Configuration
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    analysis_max_tokens: int = 500  # Output token cap for one analysis

    # Food log
    food_log_path: str = "food_log.json"
    default_daily_goal: int = 2000

    # Logging
    log_level: str = "INFO"

    # App
    debug: bool = False
    app_name: str = "Calorie Photo API"
    api_version: str = "1.0.0"

    @property
    def is_llm_configured(self) -> bool:
        """Check if the OpenAI credential is present."""
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
