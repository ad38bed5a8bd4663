# backend/config.py
"""Settings loaded from environment variables (+ optional .env)."""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./taskmanager.db"
    db_pool_size: int = 10
    db_pool_timeout: int = 30

    jwt_secret: str = "dev-only-secret-change-me-before-deploying-anywhere"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24
    bcrypt_rounds: int = 12

    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    resend_api_key: str = ""
    mail_from: str = "onboarding@resend.dev"
    frontend_url: str = "http://localhost:3000"
    password_reset_expire_minutes: int = 60


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        db_pool_size=_env_int("DB_POOL_SIZE", defaults.db_pool_size),
        db_pool_timeout=_env_int("DB_POOL_TIMEOUT", defaults.db_pool_timeout),
        jwt_secret=os.getenv("JWT_SECRET", defaults.jwt_secret),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", defaults.jwt_algorithm),
        jwt_expires_minutes=_env_int("JWT_EXPIRES_MINUTES", defaults.jwt_expires_minutes),
        bcrypt_rounds=_env_int("BCRYPT_ROUNDS", defaults.bcrypt_rounds),
        cors_origins=_env_list("CORS_ORIGINS", defaults.cors_origins),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        resend_api_key=os.getenv("RESEND_API_KEY", defaults.resend_api_key),
        mail_from=os.getenv("MAIL_FROM", defaults.mail_from),
        frontend_url=os.getenv("FRONTEND_URL", defaults.frontend_url).rstrip("/"),
        password_reset_expire_minutes=_env_int(
            "PASSWORD_RESET_EXPIRE_MINUTES", defaults.password_reset_expire_minutes
        ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
