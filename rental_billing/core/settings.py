"""Application settings and environment loading utilities."""
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_FILE)


class Settings(BaseSettings):
    """Runtime configuration for the billing API, read from the environment and ``.env``."""

    app_name: str = "Rental Billing API"
    environment: str = Field(default="development", alias="ENVIRONMENT")
    database_url: str = Field(
        default="sqlite:///./data/dev.db",
        description="SQLAlchemy database URL holding owners, cars, trips and invoices",
        alias="DATABASE_URL",
    )
    sql_echo: bool = Field(default=False, description="Log emitted SQL statements", alias="SQL_ECHO")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def log_level_upper(cls, value: str) -> str:
        return value.strip().upper()

    class Config:
        env_file = ENV_FILE
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True


@lru_cache
def get_settings() -> "Settings":
    """Return cached settings instance."""

    return Settings()
