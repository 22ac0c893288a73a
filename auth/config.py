"""Auth configuration management."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path, override=True)
else:
    load_dotenv(override=True)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


_DEFAULT_JWT_SECRET = secrets.token_urlsafe(32)


@dataclass(frozen=True)
class AuthConfig:
    """Configuration values for auth flows."""

    ACCESS_TOKEN_EXPIRE_DAYS: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "30"))
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_SECRET: str = os.getenv("JWT_SECRET", _DEFAULT_JWT_SECRET)
    JWT_REFRESH_SECRET: str = os.getenv("JWT_REFRESH_SECRET") or JWT_SECRET
    JWT_ISSUER: str = os.getenv("JWT_ISSUER", "city-councilor-app")
    JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "city-councilor-users")

    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    OTP_EXPIRY_SECONDS: int = int(os.getenv("OTP_EXPIRY_SECONDS", "300"))
    MAX_OTP_ATTEMPTS: int = int(os.getenv("MAX_OTP_ATTEMPTS", "3"))
    FIXED_OTP: str | None = os.getenv("FIXED_OTP") or None

    LOGIN_RATE_LIMIT_PER_MINUTE: int = int(os.getenv("LOGIN_RATE_LIMIT_PER_MINUTE", "10"))
    REGISTER_RATE_LIMIT_PER_HOUR: int = int(os.getenv("REGISTER_RATE_LIMIT_PER_HOUR", "10"))
    RATE_LIMIT_ENABLED: bool = _parse_bool(os.getenv("RATE_LIMIT_ENABLED"), True)

    # SMS provider: "semaphore" (production) or "log" (development)
    SMS_PROVIDER: str = os.getenv("SMS_PROVIDER", "log")
    SEMAPHORE_API_URL: str = os.getenv("SEMAPHORE_API_URL", "https://api.semaphore.co")
    SEMAPHORE_API_KEY: str | None = os.getenv("SEMAPHORE_API_KEY")
    SMS_SENDER_NAME: str = os.getenv("SMS_SENDER_NAME", "CityCouncilor")
    SMS_LOG_FULL_MESSAGE: bool = _parse_bool(
        os.getenv("SMS_LOG_FULL_MESSAGE"),
        os.getenv("ENVIRONMENT", "development") != "production",
    )

    # Auth store: "postgres" (production) or "memory" (testing)
    AUTH_STORE: str = os.getenv("AUTH_STORE", "memory")

    # First admin account, created at startup and by the seed-admin command
    # when DEFAULT_ADMIN_PASSWORD is set.
    DEFAULT_ADMIN_CONTACT: str = os.getenv("DEFAULT_ADMIN_CONTACT", "09123456789")
    DEFAULT_ADMIN_PASSWORD: str | None = os.getenv("DEFAULT_ADMIN_PASSWORD") or None
    DEFAULT_ADMIN_FIRSTNAME: str = os.getenv("DEFAULT_ADMIN_FIRSTNAME", "System")
    DEFAULT_ADMIN_LASTNAME: str = os.getenv("DEFAULT_ADMIN_LASTNAME", "Administrator")
    DEFAULT_ADMIN_BARANGAY: str = os.getenv("DEFAULT_ADMIN_BARANGAY", "agnas")
