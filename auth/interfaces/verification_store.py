"""Verification store interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(slots=True)
class PendingVerification:
    """OTP waiting to be confirmed for a phone key."""

    phone_key: str
    code: str
    payload: dict[str, Any]
    created_at: float
    expires_at: float
    attempts: int = 0
    verified: bool = False

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class VerificationStore(Protocol):
    """Keyed store of pending verifications, one record per phone key.

    ``get`` may return a record whose ``expires_at`` has passed; callers
    check ``is_expired`` on every read and delete stale records.
    ``purge_expired`` drops every stale record and returns how many went.
    """

    async def get(self, phone_key: str) -> PendingVerification | None:
        ...

    async def save(self, record: PendingVerification) -> None:
        ...

    async def delete(self, phone_key: str) -> bool:
        ...

    async def increment_attempts(self, phone_key: str) -> int:
        ...

    async def mark_verified(self, phone_key: str) -> None:
        ...

    async def purge_expired(self, now: float) -> int:
        ...
