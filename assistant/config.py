from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings, sourced from environment variables or .env."""

    app_name: str = Field(default="EliteAssistant")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    database_url: str = Field(alias="DATABASE_URL")
    direct_database_url: Optional[str] = Field(
        default=None,
        alias="DIRECT_DATABASE_URL",
        description="Optional direct Postgres connection string used for running migrations.",
    )
    auto_run_migrations: bool = Field(default=False, alias="AUTO_RUN_MIGRATIONS")

    gemini_api_key: Optional[str] = Field(
        default=None, alias="GEMINI_API_KEY", description="Google Generative AI key"
    )
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    llm_intent_prompt_path: Path = Field(
        default=Path("prompts/intent_prompt.txt"),
        alias="LLM_INTENT_PROMPT_PATH",
    )

    telegram_bot_token: Optional[str] = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    telegram_webhook_secret: Optional[str] = Field(
        default=None, alias="TELEGRAM_WEBHOOK_SECRET"
    )
    telegram_register_webhook_on_start: bool = Field(
        default=False, alias="TELEGRAM_REGISTER_WEBHOOK_ON_START"
    )
    backend_base_url: Optional[AnyHttpUrl] = Field(
        default=None,
        alias="BACKEND_BASE_URL",
        description="The public URL where FastAPI is reachable (used by Telegram webhooks).",
    )
    internal_backend_base_url: Optional[AnyHttpUrl] = Field(
        default=None,
        alias="INTERNAL_BACKEND_BASE_URL",
        description="Internal URL used by the bot to reach the API; falls back to BACKEND_BASE_URL.",
    )

    timezone: str = Field(default="America/Sao_Paulo", alias="TIMEZONE")
    currency: str = Field(default="BRL", alias="CURRENCY", min_length=3, max_length=3)
    water_goal_ml: int = Field(default=4000, alias="WATER_GOAL_ML", ge=1)
    home_rerender_delay_seconds: float = Field(
        default=2.0,
        alias="HOME_RERENDER_DELAY_SECONDS",
        description="Delay before the hub is redrawn after a wake-up confirmation.",
        ge=0,
    )
    default_display_name: str = Field(
        default="there",
        alias="DEFAULT_DISPLAY_NAME",
        description="Greeting name used when the user has no display name.",
    )

    deploy_webhook_secret: Optional[str] = Field(default=None, alias="DEPLOY_WEBHOOK_SECRET")
    deploy_directory: Path = Field(default=Path("/docker/elite-assistant"), alias="DEPLOY_DIRECTORY")
    deploy_branch: str = Field(default="main", alias="DEPLOY_BRANCH")
    deploy_timeout_seconds: float = Field(default=120.0, alias="DEPLOY_TIMEOUT_SECONDS", gt=0)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor so imports share a single settings instance."""
    return Settings()  # type: ignore[call-arg]
