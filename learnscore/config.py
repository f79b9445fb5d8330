"""Application settings loaded from environment variables and .env."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Application
    APP_NAME: str = "LearnScore"
    APP_VERSION: str = "0.1.0"
    APP_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Storage
    DATA_DIR: Path = BASE_DIR / "data"
    DATABASE_URL: str = f"sqlite+aiosqlite:///{BASE_DIR / 'data' / 'learnscore.db'}"

    # Identity: header set by the authenticating reverse proxy
    AUTH_HEADER: str = "x-authenticated-user-email"

    # Grading policy
    AUTO_GRADE_OVERRIDES_MANUAL: bool = False


settings = Settings()
