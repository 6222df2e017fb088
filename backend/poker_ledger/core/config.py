from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DB_URL: str = "sqlite:///./poker_ledger.db"

    # Used when a request carries no sync key
    LOCAL_STORE_PATH: str = "./poker_ledger_data_v2.json"

    SYNC_KEY_HEADER: str = "X-Sync-Key"

    QUICK_SESSION_DURATION_MINUTES: int = 180  # 3 hours
    DEFAULT_LOCATION: str = "Home Game"

    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    LOG_LEVEL: str = "INFO"

    def cors_list(self) -> list[str]:
        return [x.strip() for x in self.CORS_ORIGINS.split(",") if x.strip()]


settings = Settings()
