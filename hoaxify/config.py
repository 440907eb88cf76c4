"""Application configuration"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Hoaxify"
    VERSION: str = "0.1.0"
    DEBUG: bool = True

    # database
    DATABASE_URL: str

    # Email
    RESEND_API_KEY: str = ""
    RESEND_FROM_EMAIL: str = "Hoaxify <onboarding@resend.dev>"

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Session tokens
    TOKEN_TTL_DAYS: int = 7
    TOKEN_LENGTH: int = 32
    TOKEN_CLEANUP_INTERVAL_HOURS: int = 1

    # Activation / password reset tokens
    ONE_TIME_TOKEN_LENGTH: int = 16

    # Scheduler
    SCHEDULER_ENABLED: bool = True

    # i18n
    DEFAULT_LANGUAGE: str = "en"

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )


settings = Settings()
