"""Application settings — loaded from environment variables / .env file."""

from __future__ import annotations

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Telegram
    BOT_TOKEN: str

    # Comma-separated Telegram user IDs alerted about every new order
    ADMIN_CHAT_ID: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"

    # Confirmation message generation (optional, template otherwise)
    LLM_ENABLED: bool = False
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_TIMEOUT_SECONDS: int = 20
    OPENAI_MAX_TOKENS: int = 800
    OPENAI_TEMPERATURE: float = 0.4

    # Simulated SMS / e-mail providers
    NOTIFY_TIMEOUT_SECONDS: float = 10.0
    NOTIFY_LATENCY_SECONDS: float = 0.5
    NOTIFY_FAILURE_RATE: float = 0.2

    @property
    def admin_ids(self) -> List[int]:
        """Parse comma-separated admin IDs into a list of ints."""
        return [int(x.strip()) for x in self.ADMIN_CHAT_ID.split(",") if x.strip()]

    @property
    def llm_configured(self) -> bool:
        return bool(self.LLM_ENABLED and self.OPENAI_API_KEY)

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
