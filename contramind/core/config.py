from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "ContraMind.ai"
    DATABASE_URL: str = "sqlite:///./contramind.db"
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"
    CELERY_TASK_ALWAYS_EAGER: bool = False

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash-exp"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    AI_TIMEOUT_SECONDS: float = 120.0
    CHAT_HISTORY_LIMIT: int = 5

    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    STORAGE_TIMEOUT_SECONDS: float = 60.0
    ANALYSIS_STALE_AFTER_MINUTES: int = 30

    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    OWNER_OPEN_ID: str = ""
    TRIAL_DAYS: int = 14

    TAP_SECRET_KEY: str = ""
    TAP_PUBLIC_KEY: str = ""
    TAP_API_URL: str = "https://api.tap.company/v2"

    EMAIL_API_URL: str = ""
    EMAIL_API_KEY: str = ""
    EMAIL_FROM: str = "ContraMind.ai <no-reply@contramind.ai>"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> "Settings":
    return Settings()


settings = get_settings()
