"""User store interface."""

from __future__ import annotations

from typing import Any, Protocol

SORTABLE_FIELDS = (
    "created_at",
    "first_name",
    "last_name",
    "contact_number",
    "barangay",
    "last_login",
)


class UserStore(Protocol):
    """Persistence collaborator for durable user records.

    ``create_user`` raises ``DuplicateContactNumberError`` when the contact
    number is already taken; ``update_user`` and ``delete_user`` return
    ``None``/``False`` for unknown ids.

    ``list_users`` applies exact-match ``filters`` (role, barangay,
    is_active, is_verified) and a case-insensitive ``search`` over names and
    contact number, then sorts by one of ``SORTABLE_FIELDS``. It returns the
    requested slice together with the total number of matches.
    """

    async def get_by_contact_number(self, contact_number: str) -> dict[str, Any] | None:
        ...

    async def get_by_id(self, user_id: Any) -> dict[str, Any] | None:
        ...

    async def create_user(self, data: dict[str, Any]) -> dict[str, Any]:
        ...

    async def update_user(self, user_id: Any, updates: dict[str, Any]) -> dict[str, Any] | None:
        ...

    async def delete_user(self, user_id: Any) -> bool:
        ...

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
        ...
