"""Caller identity and role checks.

The caller is named by the ``X-User-Id`` header, which an upstream
gateway sets after authenticating the request.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from forum.errors import ApiError
from forum.models import User

USER_ID_HEADER = "X-User-Id"


class RoleService:
    def __init__(self, db: Session, request: Request):
        self.db = db
        self.request = request
        self._user: Optional[User] = None
        self._resolved = False

    def current_user(self) -> Optional[User]:
        if not self._resolved:
            self._resolved = True
            raw = self.request.headers.get(USER_ID_HEADER, "").strip()
            if raw.isascii() and raw.isdigit() and len(raw) <= 18:
                self._user = self.db.get(User, int(raw))
        return self._user

    def user_id(self) -> Optional[int]:
        user = self.current_user()
        return user.user_id if user is not None else None

    def user_id_or_fail(self) -> int:
        user_id = self.user_id()
        if user_id is None:
            raise ApiError("USER_NEED_LOGIN", 401, "login required")
        return user_id

    def manager_id_or_fail(self) -> int:
        user_id = self.user_id_or_fail()
        if not self.current_user().is_manager:
            raise ApiError("USER_NEED_MANAGE_PERMISSION", 403, "manager permission required")
        return user_id
