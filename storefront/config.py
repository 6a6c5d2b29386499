# storefront/config.py
from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (and `.env` if present).

    Usage:
        from storefront.config import get_settings
        settings = get_settings()
    """

    # ---------------------------
    # Storage
    # ---------------------------
    DATABASE_URL: str = Field(
        default="sqlite:///./storefront.db",
        description="SQLAlchemy database URL",
    )
    SQL_ECHO: bool = Field(default=False, description="Log every SQL statement")

    # ---------------------------
    # Application
    # ---------------------------
    STORE_NAME: str = Field(default="Gadget Store")
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = Field(default=8085, ge=1, le=65535)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)",
    )

    # ---------------------------
    # Catalog
    # ---------------------------
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1)
    MAX_PAGE_SIZE: int = Field(default=100, ge=1)
    LOW_STOCK_THRESHOLD: int = Field(default=10, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
