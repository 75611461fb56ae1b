"""
Configuration settings for InvoiceDesk
"""
import os
from pathlib import Path
from typing import List

import dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Resolve .env paths relative to this file so settings load regardless of cwd.
_CONFIG_DIR = Path(__file__).resolve().parent.parent  # backend/
_PROJECT_ROOT = _CONFIG_DIR.parent                    # repository root
_ENV_CANDIDATES = [
    _CONFIG_DIR / ".env",
    _PROJECT_ROOT / ".env",
]
_ENV_FILE = [str(p) for p in _ENV_CANDIDATES if p.is_file()]

# Load .env into os.environ so the os.getenv defaults below see it too.
for p in _ENV_CANDIDATES:
    if p.is_file():
        dotenv.load_dotenv(p, override=False)
        break


SUPPORTED_LOCALES: List[str] = ["de-DE", "en-US", "fr-FR", "es-ES"]


class Settings(BaseSettings):
    """Application settings"""

    # App
    APP_NAME: str = "InvoiceDesk"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Remote API (jobs, quotes, invoices, customers, templates)
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:3001/api")
    API_TIMEOUT_SECONDS: float = float(os.getenv("API_TIMEOUT_SECONDS", "10"))

    # Tax / company defaults
    DEFAULT_TAX_RATE: float = float(os.getenv("DEFAULT_TAX_RATE", "19"))
    # Kleinunternehmerregelung (§ 19 UStG): no VAT line on documents
    IS_SMALL_BUSINESS: bool = os.getenv("IS_SMALL_BUSINESS", "False").lower() in ("true", "1", "yes")
    # General + customer-specific templates in one dropdown list
    SHOW_COMBINED_DROPDOWNS: bool = os.getenv("SHOW_COMBINED_DROPDOWNS", "True").lower() in ("true", "1", "yes")
    LOCALE: str = os.getenv("LOCALE", "de-DE")

    # Documents
    QUOTE_VALIDITY_DAYS: int = int(os.getenv("QUOTE_VALIDITY_DAYS", "30"))
    DEFAULT_PAYMENT_DAYS: int = int(os.getenv("DEFAULT_PAYMENT_DAYS", "30"))

    # Calendar: rank for jobs that were never positioned manually (sorts last)
    UNRANKED_POSITION: int = int(os.getenv("UNRANKED_POSITION", "999"))

    @field_validator("LOCALE")
    @classmethod
    def _known_locale(cls, value: str) -> str:
        if value not in SUPPORTED_LOCALES:
            return "de-DE"
        return value

    @field_validator("DEFAULT_TAX_RATE")
    @classmethod
    def _tax_rate_range(cls, value: float) -> float:
        if value < 0 or value > 100:
            raise ValueError("DEFAULT_TAX_RATE must be between 0 and 100")
        return value

    @property
    def api_base_url(self) -> str:
        """Base URL without trailing slash"""
        return self.API_BASE_URL.rstrip("/")

    class Config:
        env_file = _ENV_FILE if _ENV_FILE else [".env", "../.env"]
        case_sensitive = True
        extra = "ignore"


settings = Settings()
