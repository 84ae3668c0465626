"""Application configuration.

Environment variables override all defaults. A `.env` file next to the
backend directory is loaded for local development.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./gasledger.db")
    # Ignored for SQLite
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))
    # Seconds a SQLite connection waits on a locked database file
    SQLITE_BUSY_TIMEOUT: float = float(os.getenv("SQLITE_BUSY_TIMEOUT", "30"))

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        ).split(",")
        if origin.strip()
    ]

    # Invoice numbering
    # Counter never issues a number below this unless an `invoice_start`
    # counter row overrides it.
    INVOICE_START_NUMBER: int = int(os.getenv("INVOICE_START_NUMBER", "10000"))
    INVOICE_MAX_ATTEMPTS: int = int(os.getenv("INVOICE_MAX_ATTEMPTS", "5"))

    # Full-cylinder sales: when no gas product matches by id, name or size,
    # deduct from the highest-stock gas product instead of skipping.
    GAS_FALLBACK_ANY_STOCK: bool = _env_bool("GAS_FALLBACK_ANY_STOCK", True)


settings = Settings()
