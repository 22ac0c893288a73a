"""Core auth service."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from auth.barangays import BARANGAYS, is_valid_barangay, normalize_barangay
from auth.exceptions import AuthException, DuplicateContactNumberError, ErrorKind
from auth.interfaces.user_store import UserStore
from auth.phone import is_valid_phone, normalize_phone
from auth.security import decode_access_token, hash_password, verify_password
from auth.services.otp_service import OtpDispatch, OtpService
from auth.services.session_service import SessionService

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid credentials"
_DEACTIVATED = "Your account has been deactivated. Please contact support."
_ALREADY_REGISTERED = "Contact number is already registered"


def _unauthorized(message: str) -> AuthException:
    return AuthException(message, status_code=401, kind=ErrorKind.UNAUTHORIZED)


class AuthService:
    def __init__(
        self,
        user_store: UserStore,
        otp_service: OtpService,
        session_service: SessionService,
    ) -> None:
        self._users = user_store
        self._otp = otp_service
        self._sessions = session_service

    async def initiate_registration(
        self,
        first_name: str,
        last_name: str,
        contact_number: str,
        password: str,
        barangay: str,
    ) -> OtpDispatch:
        if not is_valid_phone(contact_number):
            raise AuthException(
                "Please enter a valid Philippine mobile number", kind=ErrorKind.VALIDATION_ERROR
            )
        if not is_valid_barangay(barangay):
            raise AuthException("Please select a valid barangay", kind=ErrorKind.VALIDATION_ERROR)

        phone_key = normalize_phone(contact_number)
        if await self._users.get_by_contact_number(phone_key):
            raise AuthException(_ALREADY_REGISTERED, kind=ErrorKind.ALREADY_REGISTERED)

        payload = {
            "first_name": first_name.strip(),
            "last_name": last_name.strip(),
            "contact_number": phone_key,
            "password": password,
            "barangay": normalize_barangay(barangay),
        }
        return await self._otp.send_otp(phone_key, payload)

    async def resend_registration_otp(self, contact_number: str) -> OtpDispatch:
        return await self._otp.resend_otp(normalize_phone(contact_number))

    async def complete_registration(self, contact_number: str, otp: str) -> dict[str, Any]:
        phone_key = normalize_phone(contact_number)
        payload = await self._otp.verify_otp(phone_key, otp)

        hashed = await asyncio.to_thread(hash_password, payload["password"])
        try:
            user = await self._users.create_user(
                {
                    "first_name": payload["first_name"],
                    "last_name": payload["last_name"],
                    "contact_number": payload["contact_number"],
                    "hashed_password": hashed,
                    "barangay": payload["barangay"],
                    "role": "citizen",
                    "is_verified": True,
                    "is_active": True,
                }
            )
        except DuplicateContactNumberError as exc:
            await self._otp.cleanup(phone_key)
            raise AuthException(_ALREADY_REGISTERED, kind=ErrorKind.ALREADY_REGISTERED) from exc

        await self._otp.cleanup(phone_key)
        logger.info("New user registered: %s (id=%s)", user["contact_number"], user["id"])
        return {"user": user, "tokens": self._sessions.issue_session(user["id"])}

    async def login(self, contact_number: str, password: str) -> dict[str, Any]:
        user = await self._users.get_by_contact_number(normalize_phone(contact_number))
        if not user:
            raise _unauthorized(_INVALID_CREDENTIALS)

        hashed = user.get("hashed_password")
        if not hashed or not await asyncio.to_thread(verify_password, password, hashed):
            raise _unauthorized(_INVALID_CREDENTIALS)

        if not user.get("is_active", False):
            raise _unauthorized(_DEACTIVATED)

        user = await self._users.update_user(
            user["id"], {"last_login": datetime.now(timezone.utc)}
        ) or user
        logger.info("User logged in: %s (id=%s)", user["contact_number"], user["id"])
        return {"user": user, "tokens": self._sessions.issue_session(user["id"])}

    async def refresh(self, refresh_token: str) -> dict[str, Any]:
        token, user = await self._sessions.refresh_session(refresh_token)
        return {"token": token, "user": user}

    async def get_user_from_access(self, access_token: str) -> dict[str, Any]:
        payload = decode_access_token(access_token)
        user = await self._users.get_by_id(payload["id"])
        if not user:
            raise _unauthorized("User no longer exists")
        if not user.get("is_active", False):
            raise _unauthorized(_DEACTIVATED)
        return user

    async def update_profile(
        self,
        user_id: Any,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        barangay: str | None = None,
        bio: str | None = None,
        address: str | None = None,
    ) -> dict[str, Any]:
        updates: dict[str, Any] = {}
        if first_name:
            updates["first_name"] = first_name.strip()
        if last_name:
            updates["last_name"] = last_name.strip()
        if barangay:
            if not is_valid_barangay(barangay):
                raise AuthException(
                    "Please select a valid barangay", kind=ErrorKind.VALIDATION_ERROR
                )
            updates["barangay"] = normalize_barangay(barangay)
        profile = {
            key: value.strip()
            for key, value in (("bio", bio), ("address", address))
            if value
        }
        if profile:
            updates["profile"] = profile

        user = await self._users.update_user(user_id, updates)
        if not user:
            raise AuthException("User not found", status_code=404, kind=ErrorKind.NOT_FOUND)
        return user

    async def change_password(
        self, user_id: Any, current_password: str, new_password: str
    ) -> None:
        user = await self._users.get_by_id(user_id)
        if not user:
            raise AuthException("User not found", status_code=404, kind=ErrorKind.NOT_FOUND)
        if not await asyncio.to_thread(
            verify_password, current_password, user.get("hashed_password") or ""
        ):
            raise AuthException(
                "Current password is incorrect", kind=ErrorKind.VALIDATION_ERROR
            )
        hashed = await asyncio.to_thread(hash_password, new_password)
        await self._users.update_user(user_id, {"hashed_password": hashed})
        logger.info("Password changed for user id=%s", user_id)

    async def deactivate(self, user_id: Any) -> None:
        if not await self._users.update_user(user_id, {"is_active": False}):
            raise AuthException("User not found", status_code=404, kind=ErrorKind.NOT_FOUND)
        logger.info("User id=%s deactivated their account", user_id)

    @staticmethod
    def list_barangays() -> list[str]:
        return list(BARANGAYS)
