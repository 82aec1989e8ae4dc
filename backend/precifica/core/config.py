from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "Precifica"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Hosted table API (PostgREST-style)
    STORE_URL: str = "http://localhost:54321"
    STORE_API_KEY: str | None = None
    STORE_TIMEOUT_SECONDS: float = 10.0

    # Business defaults used when a company has no settings row yet
    DEFAULT_TARGET_CMV_PERCENT: float = 35.0
    DEFAULT_DESIRED_PROFIT_PERCENT: float = 15.0
    DEFAULT_ESTIMATED_MONTHLY_SALES: int = 1000

    # Dashboards
    ACTION_CENTER_LIMIT: int = 5
    KPI_MONTHS_BACK: int = 6

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
