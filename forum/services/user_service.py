from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from forum.errors import ValidationFailed
from forum.models import User

logger = logging.getLogger(__name__)

USERNAME_MAX = 20


def upsert_user(db: Session, username: str, *, is_manager: bool = False) -> User:
    """Create ``username`` or update its manager flag."""
    name = username.strip()
    if not name or len(name) > USERNAME_MAX:
        raise ValidationFailed("USERNAME_INVALID", f"username must be 1-{USERNAME_MAX} characters")

    user = db.scalar(select(User).where(User.username == name))
    if user is None:
        user = User(username=name, is_manager=is_manager)
        logger.info("user created: %s", name)
    elif user.is_manager != is_manager:
        user.is_manager = is_manager
        logger.info("user %s manager flag set to %s", name, is_manager)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
