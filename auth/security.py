"""Security utilities for auth."""

from __future__ import annotations

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from auth.config import AuthConfig
from auth.exceptions import AuthException, ErrorKind


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=AuthConfig.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    try:
        password_bytes = password.encode("utf-8")
        hashed_bytes = hashed_password.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        return False


def generate_temporary_password(prefix: str, digits: int = 4) -> str:
    """Generate a readable temporary password for admin-created accounts."""
    base = "".join(ch for ch in prefix.lower() if ch.isalpha()) or "user"
    suffix = "".join(secrets.choice(string.digits) for _ in range(digits))
    return f"{base}{suffix}"


def create_access_token(user_id: Any) -> tuple[str, int]:
    now = datetime.now(timezone.utc)
    expire = now + timedelta(days=AuthConfig.ACCESS_TOKEN_EXPIRE_DAYS)
    payload: dict[str, Any] = {
        "id": user_id,
        "iat": now,
        "exp": expire,
        "iss": AuthConfig.JWT_ISSUER,
        "aud": AuthConfig.JWT_AUDIENCE,
    }
    token = jwt.encode(payload, AuthConfig.JWT_SECRET, algorithm=AuthConfig.JWT_ALGORITHM)
    return token, int(expire.timestamp())


def create_refresh_token(user_id: Any) -> tuple[str, int]:
    now = datetime.now(timezone.utc)
    expire = now + timedelta(days=AuthConfig.REFRESH_TOKEN_EXPIRE_DAYS)
    payload: dict[str, Any] = {
        "id": user_id,
        "type": "refresh",
        "iat": now,
        "exp": expire,
        "iss": AuthConfig.JWT_ISSUER,
        "aud": AuthConfig.JWT_AUDIENCE,
    }
    token = jwt.encode(
        payload, AuthConfig.JWT_REFRESH_SECRET, algorithm=AuthConfig.JWT_ALGORITHM
    )
    return token, int(expire.timestamp())


def decode_access_token(token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            AuthConfig.JWT_SECRET,
            algorithms=[AuthConfig.JWT_ALGORITHM],
            audience=AuthConfig.JWT_AUDIENCE,
            issuer=AuthConfig.JWT_ISSUER,
        )
    except JWTError as exc:
        raise AuthException(
            "Not authorized to access this route", status_code=401, kind=ErrorKind.UNAUTHORIZED
        ) from exc
    # Refresh tokens may share the access secret.
    if payload.get("type") == "refresh" or "id" not in payload:
        raise AuthException(
            "Not authorized to access this route", status_code=401, kind=ErrorKind.UNAUTHORIZED
        )
    return payload


def decode_refresh_token(token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            AuthConfig.JWT_REFRESH_SECRET,
            algorithms=[AuthConfig.JWT_ALGORITHM],
            audience=AuthConfig.JWT_AUDIENCE,
            issuer=AuthConfig.JWT_ISSUER,
        )
    except JWTError as exc:
        raise AuthException(
            "Invalid or expired refresh token",
            status_code=401,
            kind=ErrorKind.INVALID_REFRESH_TOKEN,
        ) from exc
    if payload.get("type") != "refresh":
        raise AuthException(
            "Invalid refresh token", status_code=401, kind=ErrorKind.INVALID_REFRESH_TOKEN
        )
    return payload
