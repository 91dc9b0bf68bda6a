"""Application configuration settings.

Everything is read from the environment once at import time. A ``.env`` file
at the project root is loaded first when present.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_secret(name: str, default: str = "") -> str:
    """Value of ``name``, or the contents of the file named by ``<name>_FILE``.

    The file form is how Docker and Kubernetes secrets are mounted.
    """
    secret_path = os.getenv(f"{name}_FILE")
    if secret_path:
        return Path(secret_path).read_text().strip()
    return os.getenv(name, default)


# =============================================================================
# Server Configuration
# =============================================================================

PORT = int(os.getenv("PORT", "5000"))
APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
# Seconds /api/health waits for a pooled connection before reporting the database down
HEALTH_CHECK_TIMEOUT = float(os.getenv("HEALTH_CHECK_TIMEOUT", "2"))
API_VERSION = "1.0.0"

ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

# =============================================================================
# Database Configuration
# =============================================================================

# "sqlite" for an embedded file database, "postgres" for a network server
DB_DRIVER = os.getenv("DB_DRIVER", "sqlite")

DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", "5432"))
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = _read_secret("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME", "geektext")

DATA_DIR = Path(os.getenv("DATA_DIR", "Data"))
DB_PATH = os.getenv("DB_PATH", str(DATA_DIR / f"{DB_NAME}.db"))

DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", "10"))
# Seconds to wait for a free connection; unset means wait indefinitely
_acquire_timeout = os.getenv("DB_ACQUIRE_TIMEOUT", "")
DB_ACQUIRE_TIMEOUT: Optional[float] = float(_acquire_timeout) if _acquire_timeout else None
DB_CREATE_SCHEMA = _as_bool(os.getenv("DB_CREATE_SCHEMA", "true"))

SUPPORTED_DRIVERS = {"sqlite", "postgres"}


class DatabaseConfig:
    """Database configuration container."""

    driver = DB_DRIVER
    host = DB_HOST
    port = DB_PORT
    user = DB_USER
    password = DB_PASSWORD
    database = DB_NAME
    path = DB_PATH
    max_connections = DB_POOL_MAX
    acquire_timeout = DB_ACQUIRE_TIMEOUT
    create_schema = DB_CREATE_SCHEMA

    @classmethod
    def validate(cls) -> None:
        """Validate configuration settings."""
        if cls.driver not in SUPPORTED_DRIVERS:
            raise ValueError(
                f"DB_DRIVER must be one of {sorted(SUPPORTED_DRIVERS)}, got '{cls.driver}'"
            )
        if cls.max_connections <= 0:
            raise ValueError("DB_POOL_MAX must be positive")
        if cls.acquire_timeout is not None and cls.acquire_timeout <= 0:
            raise ValueError("DB_ACQUIRE_TIMEOUT must be positive when set")
        if cls.driver == "postgres" and not cls.host:
            raise ValueError("DB_HOST is required for the postgres driver")
