"""PostgreSQL auth stores using SQLAlchemy."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth.exceptions import DuplicateContactNumberError
from auth.interfaces.user_store import SORTABLE_FIELDS
from db.engine import SessionLocal
from db.models.user import User

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("avatar", "bio", "address")
_UPDATABLE_FIELDS = {
    "first_name",
    "last_name",
    "hashed_password",
    "barangay",
    "role",
    "is_verified",
    "is_active",
    "last_login",
}
_FILTERABLE_FIELDS = {"role", "barangay", "is_active", "is_verified"}


def _to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "contact_number": user.contact_number,
        "hashed_password": user.hashed_password,
        "barangay": user.barangay,
        "role": user.role,
        "is_verified": user.is_verified,
        "is_active": user.is_active,
        "profile": {
            field: getattr(user, field)
            for field in _PROFILE_FIELDS
            if getattr(user, field) is not None
        },
        "last_login": user.last_login,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def _coerce_id(user_id: Any) -> int | None:
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None


class PostgresUserStore:
    """User store backed by PostgreSQL."""

    def _get_session(self) -> Session:
        return SessionLocal()

    async def get_by_contact_number(self, contact_number: str) -> dict | None:
        with self._get_session() as db:
            user = db.execute(
                select(User).where(User.contact_number == contact_number)
            ).scalar_one_or_none()
            return _to_dict(user) if user else None

    async def get_by_id(self, user_id: Any) -> dict | None:
        key = _coerce_id(user_id)
        if key is None:
            return None
        with self._get_session() as db:
            user = db.get(User, key)
            return _to_dict(user) if user else None

    async def create_user(self, data: dict) -> dict:
        profile = data.get("profile") or {}
        with self._get_session() as db:
            user = User(
                first_name=data["first_name"],
                last_name=data["last_name"],
                contact_number=data["contact_number"],
                hashed_password=data["hashed_password"],
                barangay=data["barangay"],
                role=data.get("role", "citizen"),
                is_verified=data.get("is_verified", False),
                is_active=data.get("is_active", True),
                **{field: profile.get(field) for field in _PROFILE_FIELDS},
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                logger.info("Duplicate contact number on insert: %s", data["contact_number"])
                raise DuplicateContactNumberError(data["contact_number"]) from exc
            db.refresh(user)
            return _to_dict(user)

    async def update_user(self, user_id: Any, updates: dict) -> dict | None:
        key = _coerce_id(user_id)
        if key is None:
            return None
        with self._get_session() as db:
            user = db.get(User, key)
            if not user:
                return None
            for field, value in updates.items():
                if field == "profile" and isinstance(value, dict):
                    for profile_field in _PROFILE_FIELDS:
                        if profile_field in value:
                            setattr(user, profile_field, value[profile_field])
                elif field in _UPDATABLE_FIELDS:
                    setattr(user, field, value)
            db.commit()
            db.refresh(user)
            return _to_dict(user)

    async def delete_user(self, user_id: Any) -> bool:
        key = _coerce_id(user_id)
        if key is None:
            return False
        with self._get_session() as db:
            user = db.get(User, key)
            if not user:
                return False
            db.delete(user)
            db.commit()
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
        if sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"Unsupported sort field: {sort_by}")

        conditions = [
            getattr(User, field) == value
            for field, value in (filters or {}).items()
            if field in _FILTERABLE_FIELDS
        ]
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            conditions.append(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.contact_number.ilike(pattern),
                    User.barangay.ilike(pattern),
                )
            )

        column = getattr(User, sort_by)
        if descending:
            ordering = (column.desc().nulls_last(), User.id.desc())
        else:
            ordering = (column.asc().nulls_first(), User.id.asc())

        with self._get_session() as db:
            total = db.execute(
                select(func.count()).select_from(User).where(*conditions)
            ).scalar_one()
            users = db.execute(
                select(User).where(*conditions).order_by(*ordering).offset(offset).limit(limit)
            ).scalars().all()
            return [_to_dict(user) for user in users], total
