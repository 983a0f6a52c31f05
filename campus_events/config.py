# -*- coding: utf-8 -*-
"""
Application settings, read from the .env file and the environment.
"""

from starlette.config import Config
from starlette.datastructures import Secret

config = Config(".env")

ENVIRONMENT = config("ENVIRONMENT", default="development")
IS_PRODUCTION = ENVIRONMENT == "production"

# Local SQLite by default; point at PostgreSQL in production
DATABASE_URL = config("DATABASE_URL", default="sqlite+aiosqlite:///./database/campus_events.db")

SECRET_KEY = config("SECRET_KEY", cast=Secret, default="change-me-campus-events-secret")
ALGORITHM = config("ALGORITHM", default="HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = config("ACCESS_TOKEN_EXPIRE_MINUTES", cast=int, default=60 * 8)
TOKEN_URL = config("TOKEN_URL", default="/api/auth/token")

DEFAULT_BUDGET_PIN = config("DEFAULT_BUDGET_PIN", cast=Secret, default="1234")
DEFAULT_MONTHLY_BUDGET = config("DEFAULT_MONTHLY_BUDGET", cast=float, default=50000.00)
DEFAULT_MAX_PARTICIPANTS = config("DEFAULT_MAX_PARTICIPANTS", cast=int, default=100)

FRONTEND_URL = config("FRONTEND_URL", default="http://localhost:3000")

LOG_LEVEL = config("LOG_LEVEL", default="INFO")
LOG_FILE = config("LOG_FILE", default=None)


def check_production_settings() -> None:
    """Refuses to boot in production with default secrets."""
    if not IS_PRODUCTION:
        return
    if str(SECRET_KEY) == "change-me-campus-events-secret":
        raise RuntimeError("SECRET_KEY must be set to a strong value in production.")
    if str(DEFAULT_BUDGET_PIN) == "1234":
        raise RuntimeError("DEFAULT_BUDGET_PIN must be changed in production.")
    if DATABASE_URL.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must point to PostgreSQL in production.")
