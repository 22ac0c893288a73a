"""Auth dependency helpers."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, Header, HTTPException, Request

from auth.config import AuthConfig
from auth.exceptions import AuthException
from auth.interfaces.rate_limiter import RateLimiter
from auth.interfaces.sms_gateway import SmsGateway
from auth.interfaces.user_store import UserStore
from auth.services.admin_service import AdminService
from auth.services.auth_service import AuthService
from auth.services.otp_service import OtpService
from auth.services.session_service import SessionService
from auth.services.sms_service import build_sms_gateway
from auth.stores.memory_store import MemoryRateLimiter, MemoryUserStore, MemoryVerificationStore
from auth.stores.postgres_store import PostgresUserStore

_memory_user_store = MemoryUserStore()
# Pending verifications never leave the process, whatever AUTH_STORE says.
_verification_store = MemoryVerificationStore()
_memory_rate_limiter = MemoryRateLimiter()

_postgres_user_store: PostgresUserStore | None = None
_sms_gateway: SmsGateway | None = None


def get_user_store() -> UserStore:
    """Get the user store selected by AUTH_STORE."""
    if AuthConfig.AUTH_STORE == "postgres":
        global _postgres_user_store
        if _postgres_user_store is None:
            _postgres_user_store = PostgresUserStore()
        return _postgres_user_store
    return _memory_user_store


def get_sms_gateway() -> SmsGateway:
    global _sms_gateway
    if _sms_gateway is None:
        _sms_gateway = build_sms_gateway()
    return _sms_gateway


def get_otp_service() -> OtpService:
    return OtpService(_verification_store, get_sms_gateway())


def get_auth_service() -> AuthService:
    users = get_user_store()
    return AuthService(
        user_store=users,
        otp_service=get_otp_service(),
        session_service=SessionService(users),
    )


def get_admin_service() -> AdminService:
    return AdminService(get_user_store())


def get_rate_limiter() -> RateLimiter:
    return _memory_rate_limiter


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def enforce_login_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    if not AuthConfig.RATE_LIMIT_ENABLED:
        return
    key = f"login:{_client_ip(request)}"
    allowed = await limiter.allow(key, AuthConfig.LOGIN_RATE_LIMIT_PER_MINUTE, 60)
    if not allowed:
        raise HTTPException(status_code=429, detail="Too many login attempts, please try again later")


async def enforce_otp_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    if not AuthConfig.RATE_LIMIT_ENABLED:
        return
    key = f"otp:{_client_ip(request)}"
    allowed = await limiter.allow(key, AuthConfig.REGISTER_RATE_LIMIT_PER_HOUR, 3600)
    if not allowed:
        raise HTTPException(status_code=429, detail="Too many OTP requests, please try again later")


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    authorization: str | None = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Not authorized to access this route")
    try:
        return await auth_service.get_user_from_access(token)
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict[str, Any]:
    if current_user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user
