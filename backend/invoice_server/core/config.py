"""Settings, read once from the environment (and backend/.env if present).

SECRET_KEY (or JWT_SECRET) is mandatory when ENVIRONMENT=production; outside
production a fixed development key is used with a warning.
"""

import os
import warnings
from pathlib import Path
from typing import List


# Load .env for local development (safe no-op if not installed)
try:
    from dotenv import load_dotenv  # type: ignore

    _BACKEND_DIR = Path(__file__).resolve().parents[2]
    load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)
except Exception:
    pass

_DEV_SECRET_KEY = "development-only-weak-default-change-in-production"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() not in ("false", "0", "no", "off")


def _env_list(name: str, default: str) -> List[str]:
    return [part.strip() for part in os.getenv(name, default).split(",") if part.strip()]


def _secret_key(environment: str) -> str:
    key = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET")
    if key:
        return key
    if environment == "production":
        raise ValueError(
            "SECRET_KEY (or JWT_SECRET) must be set when ENVIRONMENT=production. "
            "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )
    warnings.warn(
        "SECRET_KEY not set; signing tokens with the development key. "
        "Set SECRET_KEY in backend/.env before deploying.",
        RuntimeWarning,
    )
    return _DEV_SECRET_KEY


class Settings:
    PROJECT_NAME: str = "Invoice Server API"
    VERSION: str = "1.0.0"

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./invoices.db")
    # Drop and recreate every table on startup
    DB_RESET: bool = _env_flag("DB_RESET", "false")

    # Tokens: 24 hours by default
    SECRET_KEY: str = _secret_key(ENVIRONMENT)
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

    # Passwords
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))

    # Comma separated; "*" allows any origin (credentials are then disabled)
    CORS_ORIGINS: List[str] = _env_list("CORS_ORIGINS", "*")

    # Development escape hatch: when False, token checks are skipped and every
    # request acts as user 1. Never the default.
    API_SECURE: bool = _env_flag("API_SECURE", "true")


settings = Settings()
