"""Access/refresh token issuing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from auth.exceptions import AuthException, ErrorKind
from auth.interfaces.user_store import UserStore
from auth.security import create_access_token, create_refresh_token, decode_refresh_token


@dataclass(frozen=True)
class SessionTokens:
    access_token: str
    refresh_token: str
    access_expires_at: int
    refresh_expires_at: int


class SessionService:
    def __init__(self, user_store: UserStore) -> None:
        self._users = user_store

    def issue_session(self, user_id: Any) -> SessionTokens:
        access_token, access_exp = create_access_token(user_id)
        refresh_token, refresh_exp = create_refresh_token(user_id)
        return SessionTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_exp,
            refresh_expires_at=refresh_exp,
        )

    async def refresh_session(self, refresh_token: str) -> tuple[str, dict[str, Any]]:
        """Mint a new access token; the refresh token itself is not rotated."""
        payload = decode_refresh_token(refresh_token)
        user = await self._users.get_by_id(payload.get("id"))
        if not user or not user.get("is_active", False):
            raise AuthException(
                "Invalid refresh token", status_code=401, kind=ErrorKind.INVALID_REFRESH_TOKEN
            )
        access_token, _ = create_access_token(user["id"])
        return access_token, user
