"""In-memory auth stores."""

from __future__ import annotations

import asyncio
import copy
import time
from datetime import datetime, timezone
from typing import Any

from auth.exceptions import DuplicateContactNumberError
from auth.interfaces.verification_store import PendingVerification


class MemoryUserStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users_by_contact: dict[str, dict[str, Any]] = {}
        self._users_by_id: dict[int, dict[str, Any]] = {}
        self._next_id = 1

    async def get_by_contact_number(self, contact_number: str) -> dict | None:
        async with self._lock:
            user = self._users_by_contact.get(contact_number)
            return copy.deepcopy(user) if user else None

    async def get_by_id(self, user_id: Any) -> dict | None:
        async with self._lock:
            user = self._users_by_id.get(_coerce_id(user_id))
            return copy.deepcopy(user) if user else None

    async def create_user(self, data: dict) -> dict:
        async with self._lock:
            contact_number = data["contact_number"]
            if contact_number in self._users_by_contact:
                raise DuplicateContactNumberError(contact_number)
            user_id = self._next_id
            self._next_id += 1
            now = datetime.now(timezone.utc)
            payload = {
                "role": "citizen",
                "is_active": True,
                "is_verified": False,
                "profile": {},
                "last_login": now,
                **copy.deepcopy(data),
            }
            payload["id"] = user_id
            payload["created_at"] = payload.get("created_at", now)
            payload["updated_at"] = payload.get("updated_at", payload["created_at"])
            self._users_by_contact[contact_number] = payload
            self._users_by_id[user_id] = payload
            return copy.deepcopy(payload)

    async def update_user(self, user_id: Any, updates: dict) -> dict | None:
        async with self._lock:
            user = self._users_by_id.get(_coerce_id(user_id))
            if not user:
                return None
            for key, value in updates.items():
                if key == "profile" and isinstance(value, dict):
                    user.setdefault("profile", {}).update(value)
                else:
                    user[key] = copy.deepcopy(value)
            user["updated_at"] = datetime.now(timezone.utc)
            return copy.deepcopy(user)

    async def delete_user(self, user_id: Any) -> bool:
        async with self._lock:
            user = self._users_by_id.pop(_coerce_id(user_id), None)
            if not user:
                return False
            self._users_by_contact.pop(user["contact_number"], None)
            return True

    async def list_users(
        self,
        *,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        descending: bool = True,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[dict[str, Any]], int]:
        filters = filters or {}
        needle = search.strip().lower() if search else ""
        async with self._lock:
            matches = [
                user
                for user in self._users_by_id.values()
                if all(user.get(field) == value for field, value in filters.items())
                and (not needle or _matches_search(user, needle))
            ]
            matches.sort(key=lambda user: user["id"], reverse=descending)
            matches.sort(
                key=lambda user: (user.get(sort_by) is not None, user.get(sort_by) or ""),
                reverse=descending,
            )
            page = matches[offset:offset + limit]
            return [copy.deepcopy(user) for user in page], len(matches)


def _matches_search(user: dict[str, Any], needle: str) -> bool:
    return any(
        needle in str(user.get(field) or "").lower()
        for field in ("first_name", "last_name", "contact_number", "barangay")
    )


class MemoryVerificationStore:
    """Process-local pending verifications keyed by phone number.

    Saving a record for an existing key replaces it. Nothing is scheduled;
    stale records are dropped by ``purge_expired`` or by the reader.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._records: dict[str, PendingVerification] = {}

    async def get(self, phone_key: str) -> PendingVerification | None:
        async with self._lock:
            record = self._records.get(phone_key)
            return copy.deepcopy(record) if record else None

    async def save(self, record: PendingVerification) -> None:
        async with self._lock:
            self._records[record.phone_key] = copy.deepcopy(record)

    async def delete(self, phone_key: str) -> bool:
        async with self._lock:
            return self._records.pop(phone_key, None) is not None

    async def increment_attempts(self, phone_key: str) -> int:
        async with self._lock:
            record = self._records.get(phone_key)
            if not record:
                return 0
            record.attempts += 1
            return record.attempts

    async def mark_verified(self, phone_key: str) -> None:
        async with self._lock:
            record = self._records.get(phone_key)
            if record:
                record.verified = True

    async def purge_expired(self, now: float) -> int:
        async with self._lock:
            stale = [key for key, record in self._records.items() if record.is_expired(now)]
            for key in stale:
                del self._records[key]
            return len(stale)

    def __len__(self) -> int:
        return len(self._records)


class MemoryRateLimiter:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._hits: dict[str, list[float]] = {}

    async def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        now = time.time()
        async with self._lock:
            hits = self._hits.get(key, [])
            hits = [timestamp for timestamp in hits if (now - timestamp) < window_seconds]
            if len(hits) >= limit:
                self._hits[key] = hits
                return False
            hits.append(now)
            self._hits[key] = hits
            return True


def _coerce_id(user_id: Any) -> int | None:
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None
