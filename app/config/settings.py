# app/config/settings.py
# Application configuration loaded once from the environment

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv


def _get_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {key} must be an integer") from exc


class Settings:
    """Configuration for the API, passed explicitly into services and dependencies."""

    def __init__(self) -> None:
        load_dotenv()
        self.app_env = os.getenv("APP_ENV", "development")

        # Database
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./tasks.db")
        self.database_sslmode = os.getenv("DATABASE_SSLMODE")

        # Session tokens
        self.jwt_secret_key = os.getenv("JWT_SECRET_KEY", "change-me")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.jwt_expires_minutes = _get_int("JWT_EXPIRES_MINUTES", 60 * 24)

        # Credential lifecycle
        self.reset_token_expire_minutes = _get_int("RESET_TOKEN_EXPIRE_MINUTES", 10)
        self.password_min_length = _get_int("PASSWORD_MIN_LENGTH", 6)

        # CORS
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins: List[str] = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["http://localhost:5173"]

        # Outbound email
        self.smtp_host = os.getenv("SMTP_HOST", "")
        self.smtp_port = _get_int("SMTP_PORT", 587)
        self.smtp_username = os.getenv("SMTP_USERNAME", "")
        self.smtp_password = os.getenv("SMTP_PASSWORD", "")
        self.smtp_from_email = os.getenv("SMTP_FROM_EMAIL", "")
        self.smtp_from_name = os.getenv("SMTP_FROM_NAME", "Task Manager")
        self.smtp_use_tls = _get_bool(os.getenv("SMTP_USE_TLS"), default=True)

        # Account maintenance
        self.scheduler_enabled = _get_bool(os.getenv("SCHEDULER_ENABLED"), default=True)
        self.reset_cleanup_interval_minutes = _get_int("RESET_CLEANUP_INTERVAL_MINUTES", 15)
        self.unverified_account_ttl_hours = _get_int("UNVERIFIED_ACCOUNT_TTL_HOURS", 48)

        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_from_email)

    def validate(self) -> None:
        if self.app_env.lower() == "production" and self.jwt_secret_key == "change-me":
            raise RuntimeError("JWT_SECRET_KEY must be set in production.")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
