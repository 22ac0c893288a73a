"""SMS delivery service."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence

import httpx

from auth.config import AuthConfig
from auth.exceptions import SmsDeliveryError
from auth.interfaces.sms_gateway import SmsGateway
from auth.phone import mask_phone, normalize_phone

logger = logging.getLogger(__name__)

_MAX_SEND_ATTEMPTS = 3
_RETRY_DELAY_SECONDS = 0.5


def mask_code(message: str) -> str:
    """Replace every run of 4+ digits with asterisks."""
    return re.sub(r"\d{4,}", lambda match: "*" * len(match.group(0)), message)


def build_otp_message(code: str, expiry_seconds: int) -> str:
    minutes = max(1, expiry_seconds // 60)
    return f"Your City Councilor verification code is: {code}. Valid for {minutes} minutes."


class LogSmsGateway:
    """Development gateway: writes messages to the log instead of sending them."""

    def __init__(self, log_full_message: bool = False) -> None:
        self._log_full_message = log_full_message

    async def send(self, number: str, message: str) -> None:
        masked_number = mask_phone(normalize_phone(number))
        logger.info("SMS to %s: %s", masked_number, mask_code(message))
        if self._log_full_message:
            logger.debug("SMS to %s (unmasked): %s", masked_number, message)

    async def send_bulk(self, numbers: Sequence[str], message: str) -> int:
        for number in numbers:
            await self.send(number, message)
        return len(numbers)


class SemaphoreSmsGateway:
    """Semaphore (semaphore.co) SMS API client."""

    def __init__(
        self,
        api_key: str | None,
        sender_name: str,
        base_url: str = "https://api.semaphore.co",
        transport: httpx.AsyncBaseTransport | None = None,
        retry_delay: float = _RETRY_DELAY_SECONDS,
    ) -> None:
        self._api_key = api_key
        self._sender_name = sender_name
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._retry_delay = retry_delay
        if not api_key:
            logger.warning("SEMAPHORE_API_KEY is not set; SMS delivery will fail")

    async def send(self, number: str, message: str) -> None:
        await self._post_messages(normalize_phone(number), message)
        logger.info("SMS sent to %s", mask_phone(normalize_phone(number)))

    async def send_bulk(self, numbers: Sequence[str], message: str) -> int:
        if not numbers:
            return 0
        formatted = [normalize_phone(number) for number in numbers]
        await self._post_messages(",".join(formatted), message)
        logger.info("Bulk SMS sent to %d recipients", len(formatted))
        return len(formatted)

    async def _post_messages(self, number: str, message: str) -> None:
        if not self._api_key:
            raise SmsDeliveryError("SMS service not configured - missing API key")

        payload = {
            "apikey": self._api_key,
            "number": number,
            "message": message,
            "sendername": self._sender_name,
        }
        url = f"{self._base_url}/api/v4/messages"
        async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
            for attempt in range(1, _MAX_SEND_ATTEMPTS + 1):
                try:
                    response = await client.post(url, json=payload)
                    response.raise_for_status()
                    return
                except httpx.HTTPError as exc:
                    if attempt == _MAX_SEND_ATTEMPTS:
                        raise SmsDeliveryError(f"Semaphore SMS request failed: {exc}") from exc
                    logger.warning("Semaphore SMS attempt %s failed: %s", attempt, exc)
                    await asyncio.sleep(self._retry_delay * attempt)


def build_sms_gateway() -> SmsGateway:
    """Create the SMS gateway selected by SMS_PROVIDER."""
    provider = AuthConfig.SMS_PROVIDER.strip().lower()
    if provider == "semaphore":
        return SemaphoreSmsGateway(
            api_key=AuthConfig.SEMAPHORE_API_KEY,
            sender_name=AuthConfig.SMS_SENDER_NAME,
            base_url=AuthConfig.SEMAPHORE_API_URL,
        )
    if provider != "log":
        logger.warning("Unknown SMS_PROVIDER %r, falling back to log gateway", provider)
    return LogSmsGateway(log_full_message=AuthConfig.SMS_LOG_FULL_MESSAGE)
