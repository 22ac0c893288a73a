"""One-time password issuing and verification."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from auth.config import AuthConfig
from auth.exceptions import AuthException, ErrorKind, SmsDeliveryError
from auth.interfaces.sms_gateway import SmsGateway
from auth.interfaces.verification_store import PendingVerification, VerificationStore
from auth.phone import mask_phone, to_international
from auth.services.sms_service import build_otp_message

logger = logging.getLogger(__name__)

OTP_LENGTH = 6


@dataclass(frozen=True)
class OtpDispatch:
    masked_number: str
    expires_in: int


def generate_otp() -> str:
    """Uniformly random numeric code; leading zeros are kept."""
    return f"{secrets.randbelow(10**OTP_LENGTH):0{OTP_LENGTH}d}"


class OtpService:
    """Issues OTPs over SMS and checks submitted codes.

    Every read checks expiry against the injected clock, so a record is
    never usable after ``expiry_seconds`` even if it was not swept yet.
    """

    def __init__(
        self,
        verification_store: VerificationStore,
        sms_gateway: SmsGateway,
        *,
        expiry_seconds: int = AuthConfig.OTP_EXPIRY_SECONDS,
        max_attempts: int = AuthConfig.MAX_OTP_ATTEMPTS,
        clock: Callable[[], float] = time.time,
        code_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = verification_store
        self._sms = sms_gateway
        self.expiry_seconds = expiry_seconds
        self.max_attempts = max_attempts
        self._clock = clock
        if code_factory is None:
            fixed = AuthConfig.FIXED_OTP
            code_factory = (lambda: fixed) if fixed else generate_otp
        self._code_factory = code_factory

    async def send_otp(self, phone_key: str, payload: dict[str, Any]) -> OtpDispatch:
        now = self._clock()
        await self._store.purge_expired(now)

        code = self._code_factory()
        record = PendingVerification(
            phone_key=phone_key,
            code=code,
            payload=dict(payload),
            created_at=now,
            expires_at=now + self.expiry_seconds,
        )
        # Replaces any earlier request for the same number.
        await self._store.save(record)
        await self._dispatch(phone_key, code)
        return self._dispatch_result(phone_key)

    async def verify_otp(self, phone_key: str, code: str) -> dict[str, Any]:
        record = await self._store.get(phone_key)
        if record is None:
            raise AuthException(
                "OTP not found or expired. Please request a new one.",
                kind=ErrorKind.NOT_FOUND_OR_EXPIRED,
            )

        if record.is_expired(self._clock()):
            await self._store.delete(phone_key)
            raise AuthException(
                "OTP has expired. Please request a new one.", kind=ErrorKind.EXPIRED
            )

        if record.attempts >= self.max_attempts:
            await self._store.delete(phone_key)
            raise self._attempts_exceeded()

        # The attempt counts whether or not the code matches.
        attempts = await self._store.increment_attempts(phone_key)

        if record.code != code:
            if attempts >= self.max_attempts:
                await self._store.delete(phone_key)
                logger.info("OTP attempts exhausted for %s", mask_phone(phone_key))
                raise self._attempts_exceeded()
            remaining = self.max_attempts - attempts
            raise AuthException(
                f"Invalid OTP. {remaining} attempt(s) remaining.", kind=ErrorKind.INVALID_CODE
            )

        await self._store.mark_verified(phone_key)
        return dict(record.payload)

    async def resend_otp(self, phone_key: str) -> OtpDispatch:
        now = self._clock()
        record = await self._store.get(phone_key)
        if record is not None and record.is_expired(now):
            await self._store.delete(phone_key)
            record = None
        if record is None:
            raise AuthException(
                "No pending OTP request found", kind=ErrorKind.NO_PENDING_REQUEST
            )

        code = self._code_factory()
        record.code = code
        record.created_at = now
        record.expires_at = now + self.expiry_seconds
        record.attempts = 0
        record.verified = False
        await self._store.save(record)
        await self._dispatch(phone_key, code)
        return self._dispatch_result(phone_key)

    async def cleanup(self, phone_key: str) -> bool:
        return await self._store.delete(phone_key)

    async def get_status(self, phone_key: str) -> dict[str, Any]:
        record = await self._store.get(phone_key)
        now = self._clock()
        if record is None or record.is_expired(now):
            return {"exists": False}
        return {
            "exists": True,
            "attempts": record.attempts,
            "time_remaining": max(0, int(record.expires_at - now)),
            "verified": record.verified,
        }

    async def _dispatch(self, phone_key: str, code: str) -> None:
        message = build_otp_message(code, self.expiry_seconds)
        try:
            await self._sms.send(phone_key, message)
        except SmsDeliveryError as exc:
            # The pending record stays so the client can ask for a resend.
            logger.error("OTP dispatch to %s failed: %s", mask_phone(phone_key), exc)
            raise AuthException(
                "Failed to send OTP", status_code=500, kind=ErrorKind.SEND_FAILED
            ) from exc

    def _dispatch_result(self, phone_key: str) -> OtpDispatch:
        return OtpDispatch(
            masked_number=mask_phone(to_international(phone_key)),
            expires_in=self.expiry_seconds,
        )

    def _attempts_exceeded(self) -> AuthException:
        return AuthException(
            "Maximum verification attempts exceeded. Please request a new OTP.",
            kind=ErrorKind.ATTEMPTS_EXCEEDED,
        )
