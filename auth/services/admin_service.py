"""Admin-side user management."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

from auth.barangays import is_valid_barangay, normalize_barangay
from auth.exceptions import AuthException, DuplicateContactNumberError, ErrorKind
from auth.interfaces.user_store import SORTABLE_FIELDS, UserStore
from auth.phone import is_valid_phone, normalize_phone
from auth.security import generate_temporary_password, hash_password

logger = logging.getLogger(__name__)

ROLES = ("citizen", "admin")

# Query-string sort keys to store fields.
_SORT_KEYS = {
    "createdAt": "created_at",
    "firstName": "first_name",
    "lastName": "last_name",
    "contactNumber": "contact_number",
    "barangay": "barangay",
    "lastLogin": "last_login",
}


def _not_found() -> AuthException:
    return AuthException("User not found", status_code=404, kind=ErrorKind.NOT_FOUND)


class AdminService:
    def __init__(self, user_store: UserStore) -> None:
        self._users = user_store

    async def create_user(
        self,
        admin: dict[str, Any],
        *,
        first_name: str,
        last_name: str,
        contact_number: str,
        barangay: str,
        role: str = "citizen",
        password: str | None = None,
    ) -> tuple[dict[str, Any], str | None]:
        """Create an auto-verified account.

        Returns the user and, when no password was supplied, the generated
        temporary password so the admin can hand it over.
        """
        if not is_valid_phone(contact_number):
            raise AuthException(
                "Please enter a valid Philippine mobile number", kind=ErrorKind.VALIDATION_ERROR
            )
        if not is_valid_barangay(barangay):
            raise AuthException("Please select a valid barangay", kind=ErrorKind.VALIDATION_ERROR)
        if role not in ROLES:
            raise AuthException(f"Invalid role: {role}", kind=ErrorKind.VALIDATION_ERROR)

        temporary_password = None if password else generate_temporary_password(first_name)
        hashed = await asyncio.to_thread(hash_password, password or temporary_password)
        try:
            user = await self._users.create_user(
                {
                    "first_name": first_name.strip(),
                    "last_name": last_name.strip(),
                    "contact_number": normalize_phone(contact_number),
                    "hashed_password": hashed,
                    "barangay": normalize_barangay(barangay),
                    "role": role,
                    "is_verified": True,
                    "is_active": True,
                }
            )
        except DuplicateContactNumberError as exc:
            raise AuthException(
                "Contact number is already registered", kind=ErrorKind.ALREADY_REGISTERED
            ) from exc

        logger.info(
            "Admin %s created user %s (id=%s)",
            admin.get("contact_number"),
            user["contact_number"],
            user["id"],
        )
        return user, temporary_password

    async def get_user(self, user_id: Any) -> dict[str, Any]:
        user = await self._users.get_by_id(user_id)
        if not user:
            raise _not_found()
        return user

    async def toggle_active(self, admin: dict[str, Any], user_id: Any) -> bool:
        user = await self.get_user(user_id)
        if str(user["id"]) == str(admin.get("id")):
            raise AuthException(
                "You cannot deactivate your own account", kind=ErrorKind.VALIDATION_ERROR
            )
        is_active = not user.get("is_active", False)
        await self._users.update_user(user["id"], {"is_active": is_active})
        logger.info(
            "Admin %s %s user id=%s",
            admin.get("contact_number"),
            "activated" if is_active else "deactivated",
            user["id"],
        )
        return is_active

    async def reset_password(
        self, admin: dict[str, Any], user_id: Any, new_password: str | None = None
    ) -> str | None:
        user = await self.get_user(user_id)
        temporary_password = (
            None if new_password else generate_temporary_password(user["first_name"])
        )
        hashed = await asyncio.to_thread(hash_password, new_password or temporary_password)
        await self._users.update_user(user["id"], {"hashed_password": hashed})
        logger.info(
            "Admin %s reset password for user %s",
            admin.get("contact_number"),
            user["contact_number"],
        )
        return temporary_password

    async def delete_user(self, admin: dict[str, Any], user_id: Any) -> None:
        user = await self.get_user(user_id)
        if str(user["id"]) == str(admin.get("id")):
            raise AuthException(
                "You cannot delete your own account", kind=ErrorKind.VALIDATION_ERROR
            )
        await self._users.delete_user(user["id"])
        logger.info(
            "Admin %s deleted user %s", admin.get("contact_number"), user["contact_number"]
        )

    async def list_users(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        role: str | None = None,
        barangay: str | None = None,
        search: str | None = None,
        is_active: bool | None = None,
        is_verified: bool | None = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> dict[str, Any]:
        """One page of users plus pagination metadata.

        ``sort_by`` accepts the camelCase keys used by the API or the store's
        own field names.
        """
        field = _SORT_KEYS.get(sort_by, sort_by)
        if field not in SORTABLE_FIELDS:
            raise AuthException(f"Cannot sort by {sort_by}", kind=ErrorKind.VALIDATION_ERROR)
        if sort_order not in ("asc", "desc"):
            raise AuthException(
                "Sort order must be 'asc' or 'desc'", kind=ErrorKind.VALIDATION_ERROR
            )
        if page < 1 or limit < 1:
            raise AuthException(
                "Page and limit must be positive", kind=ErrorKind.VALIDATION_ERROR
            )

        filters: dict[str, Any] = {}
        if role:
            filters["role"] = role
        if barangay:
            filters["barangay"] = normalize_barangay(barangay)
        if is_active is not None:
            filters["is_active"] = is_active
        if is_verified is not None:
            filters["is_verified"] = is_verified

        users, total = await self._users.list_users(
            filters=filters,
            search=search,
            sort_by=field,
            descending=sort_order == "desc",
            offset=(page - 1) * limit,
            limit=limit,
        )
        return {
            "users": users,
            "pagination": {
                "current": page,
                "pages": math.ceil(total / limit),
                "total": total,
                "limit": limit,
            },
        }

    async def update_user(
        self, admin: dict[str, Any], user_id: Any, updates: dict[str, Any]
    ) -> dict[str, Any]:
        user = await self.get_user(user_id)
        is_self = str(user["id"]) == str(admin.get("id"))
        if is_self and updates.get("is_active") is False:
            raise AuthException(
                "You cannot deactivate your own account", kind=ErrorKind.VALIDATION_ERROR
            )
        if is_self and updates.get("role") not in (None, user.get("role")):
            raise AuthException("You cannot change your own role", kind=ErrorKind.VALIDATION_ERROR)

        changes: dict[str, Any] = {}
        for field in ("first_name", "last_name"):
            if updates.get(field):
                changes[field] = updates[field].strip()
        if updates.get("barangay"):
            if not is_valid_barangay(updates["barangay"]):
                raise AuthException(
                    "Please select a valid barangay", kind=ErrorKind.VALIDATION_ERROR
                )
            changes["barangay"] = normalize_barangay(updates["barangay"])
        if updates.get("role"):
            if updates["role"] not in ROLES:
                raise AuthException(
                    f"Invalid role: {updates['role']}", kind=ErrorKind.VALIDATION_ERROR
                )
            changes["role"] = updates["role"]
        for field in ("is_active", "is_verified"):
            if updates.get(field) is not None:
                changes[field] = updates[field]
        if updates.get("profile"):
            changes["profile"] = dict(updates["profile"])

        updated = await self._users.update_user(user["id"], changes)
        if not updated:
            raise _not_found()
        logger.info(
            "Admin %s updated user %s (fields=%s)",
            admin.get("contact_number"),
            updated["contact_number"],
            ", ".join(sorted(changes)) or "none",
        )
        return updated
