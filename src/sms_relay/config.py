from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    API_KEY: str = ""

    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHAT_ID: str = ""
    TELEGRAM_API_BASE_URL: str = "https://api.telegram.org"
    TELEGRAM_TIMEOUT: float = 10.0

    RETRY_INTERVAL_SECONDS: float = 300.0
    RETRY_WORKER_ENABLED: bool = True

    DATABASE_URL: str = "sqlite+aiosqlite:///./sms_relay.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300

    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    def require_secrets(self) -> None:
        missing = [
            name
            for name in ("API_KEY", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID")
            if not getattr(self, name)
        ]
        if missing:
            raise RuntimeError(f"Missing required settings: {', '.join(missing)}")

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
