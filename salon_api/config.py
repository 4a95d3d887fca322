import os
import warnings
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

INSECURE_DEV_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup"""

    database_url: str = "sqlite:///./salon.db"
    secret_key: str = INSECURE_DEV_KEY
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24
    cookie_name: str = "token"
    cookie_secure: bool = True
    # Wall-clock "now" for booking rules is evaluated in the salon's zone
    salon_timezone: str = "Europe/Paris"
    allowed_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"
    db_pool_size: int = 20
    db_max_overflow: int = 30
    db_pool_timeout: int = 30
    db_pool_recycle: int = 300
    log_slow_queries: bool = True
    slow_query_threshold: float = 1.0


def load_settings() -> Settings:
    """Build Settings from the environment"""
    secret_key = os.getenv("SECRET_KEY")
    if not secret_key:
        warnings.warn(
            "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION",
            RuntimeWarning,
            stacklevel=2,
        )
        secret_key = INSECURE_DEV_KEY

    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./salon.db"),
        secret_key=secret_key,
        jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", str(60 * 24))),
        cookie_secure=_env_bool("COOKIE_SECURE", "true"),
        salon_timezone=os.getenv("SALON_TIMEZONE", "Europe/Paris"),
        allowed_origins=os.getenv(
            "ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000"
        ).split(","),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        db_pool_size=int(os.getenv("DB_POOL_SIZE", "20")),
        db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "30")),
        db_pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
        db_pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "300")),
        log_slow_queries=_env_bool("DB_LOG_SLOW_QUERIES", "true"),
        slow_query_threshold=float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0")),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
