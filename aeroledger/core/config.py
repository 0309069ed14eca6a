from datetime import datetime

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Aeroclub Ledger API"
    LOG_LEVEL: str = "INFO"
    # Comma-separated origins for CORS (e.g. https://club.example.cl). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""

    SECRET_KEY: str

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Railway and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "operaciones@aeroclub.local"

    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = ""

    # Post-commit notifications: retried by the worker with exponential backoff
    EMAIL_MAX_ATTEMPTS: int = 5
    EMAIL_RETRY_BASE_SECONDS: int = 60

    # Fuel purchases dated before this instant are approved without a ledger credit
    FUEL_CREDIT_CUTOFF: datetime = datetime(2025, 11, 29, 0, 0, 0)

    DEFAULT_AIRCRAFT: str = "CC-AQI"


settings = Settings()
