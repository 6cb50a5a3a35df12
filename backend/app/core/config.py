"""Application configuration.

Environment variables override all defaults.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./daanarx.db")

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        )
    )

    # Status bar: units expiring within this many days count as "expiring soon"
    EXPIRING_SOON_DAYS: int = int(os.getenv("EXPIRING_SOON_DAYS", "90"))

    # Scanner noise: shorter scan payloads are ignored
    SCAN_MIN_LENGTH: int = int(os.getenv("SCAN_MIN_LENGTH", "3"))

    # Unit snapshot cache
    UNIT_CACHE_TTL_SECONDS: int = int(os.getenv("UNIT_CACHE_TTL_SECONDS", "30"))

    TRANSACTION_LIST_LIMIT: int = int(os.getenv("TRANSACTION_LIST_LIMIT", "100"))

    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))


settings = Settings()
