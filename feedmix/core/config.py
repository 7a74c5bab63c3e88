import os
from pydantic_settings import BaseSettings

from feedmix.core.units import UnitMode


def get_default_database_url() -> str:
    """Get default database URL based on environment."""
    if os.environ.get("DATABASE_URL"):
        return os.environ.get("DATABASE_URL")
    # Check if we're in a serverless environment (Vercel, AWS Lambda, etc.)
    if os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME"):
        # Use /tmp for SQLite in serverless (ephemeral but writable)
        return "sqlite:////tmp/feed_mix.db"
    return "sqlite:///./feed_mix.db"


class Settings(BaseSettings):
    APP_NAME: str = "Poultry Feed Formulation API"
    DATABASE_URL: str = get_default_database_url()
    LOG_LEVEL: str = "INFO"

    # User preferences applied when a request leaves them out
    DEFAULT_UNIT_MODE: UnitMode = UnitMode.PERCENT
    CURRENCY: str = "USD"

    # Protein auto-suggest
    PROTEIN_SUGGESTION_INGREDIENT: str = "soybean_meal"
    PROTEIN_SUGGESTION_AMOUNT: float = 10.0

    # Flock report: share of body weight eaten per day
    DAILY_INTAKE_FRACTION: float = 0.12

    class Config:
        env_file = ".env"


settings = Settings()
