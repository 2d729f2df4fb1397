"""Application settings loaded from the environment."""

import json
from functools import lru_cache
from typing import Any, List, Literal, Optional

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_origins(value: Any) -> List[str]:
    if isinstance(value, str) and value.startswith("["):
        value = json.loads(value)
    if isinstance(value, str):
        return [origin.strip() for origin in value.split(",") if origin.strip()]
    if isinstance(value, list):
        return value
    raise ValueError(value)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "invoice-notification-backend"
    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    API_V1_STR: str = "/api"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./invoices.db"

    # External links
    BASE_URL: Optional[str] = None
    FRONTEND_URL: Optional[str] = None
    BACKEND_CORS_ORIGINS: Any = []

    # PDF rendering
    PDF_STORAGE_DIR: str = "uploads/invoices"
    PDF_FONT_PATH: Optional[str] = None
    CURRENCY_SYMBOL: str = "₹"

    # Invoice workflow switches
    PUBLIC_LINKS_ENABLED: bool = True
    NOTIFICATIONS_ENABLED: bool = True

    # WATI (WhatsApp provider)
    WATI_API_ENDPOINT: str = "https://live-server.wati.io/api/v1"
    WATI_API_TOKEN: str = ""
    WATI_SENDER_NUMBER: Optional[str] = None
    WATI_CHANNEL_PHONE_NUMBER: Optional[str] = None
    WATI_INVOICE_TEMPLATE_NAME: Optional[str] = None
    WATI_TEST_PDF_URL: Optional[str] = None
    WATI_TIMEOUT_SECONDS: float = 30.0
    DEFAULT_COUNTRY_CODE: str = "91"

    @field_validator("BASE_URL", "FRONTEND_URL", "WATI_TEST_PDF_URL", mode="before")
    @classmethod
    def _check_url(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        if not value:
            return None
        if not (value.startswith("http://") or value.startswith("https://")):
            raise ValueError("Must be a valid URL starting with http:// or https://")
        return value.rstrip("/")

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def _check_origins(cls, value: Any) -> List[str]:
        return _parse_origins(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        return self.DATABASE_URL

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SERVER_BASE_URL(self) -> str:
        """Externally reachable backend URL, used when building links."""
        return self.BASE_URL or f"http://localhost:{self.PORT}"

    @property
    def all_cors_origins(self) -> List[str]:
        origins = [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]
        if self.FRONTEND_URL:
            origins.append(self.FRONTEND_URL)
        return origins or ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
