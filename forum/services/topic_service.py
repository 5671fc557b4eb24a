from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import UploadFile
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from forum.errors import NotFoundError, ValidationFailed
from forum.models import Follow, Topic, User
from forum.schemas import TOPIC_DESCRIPTION_MAX, TOPIC_NAME_MAX, PageOut, PageParams, TopicOut, UserOut
from forum.services.audit_service import log_audit_event

logger = logging.getLogger(__name__)

FOLLOWABLE_TOPIC = "topic"

_ORDER_COLUMNS = {
    "topic_id": Topic.topic_id,
    "follower_count": Topic.follower_count,
    "create_time": Topic.create_time,
    "delete_time": Topic.delete_time,
}


class TopicService:
    """Topics, the user/topic follow graph and the topic trash.

    ``viewer_id`` is the calling user (or None) and drives the
    ``relationship`` block added to results; ``paging`` carries the page
    window for list operations.
    """

    def __init__(
        self,
        db: Session,
        *,
        viewer_id: Optional[int] = None,
        paging: Optional[PageParams] = None,
    ):
        self.db = db
        self.viewer_id = viewer_id
        self.paging = paging or PageParams()

    def get_list(self, filters: dict[str, Any], with_relationship: bool = False) -> dict[str, Any]:
        is_deleted = bool(filters.get("is_deleted"))
        deleted_clause = Topic.delete_time.is_not(None) if is_deleted else Topic.delete_time.is_(None)

        stmt = select(Topic).where(deleted_clause)
        count_stmt = select(func.count()).select_from(Topic).where(deleted_clause)

        order = self.paging.order or ("-delete_time" if is_deleted else "-follower_count")
        column = _ORDER_COLUMNS[order.lstrip("-")]
        primary = column.desc() if order.startswith("-") else column.asc()
        stmt = stmt.order_by(primary, Topic.topic_id.desc())

        rows = list(self.db.scalars(self._paginate(stmt)))
        total = int(self.db.scalar(count_stmt) or 0)
        items = [self._topic_dict(row) for row in rows]
        if with_relationship:
            self._attach_topic_relationship(items)
        return self._page(items, total)

    def get(self, topic_id: int, with_relationship: bool = False) -> Optional[dict[str, Any]]:
        topic = self._live_topic(topic_id)
        if topic is None:
            return None
        item = self._topic_dict(topic)
        if with_relationship:
            self._attach_topic_relationship([item])
        return item

    def get_or_fail(self, topic_id: int, with_relationship: bool = False) -> dict[str, Any]:
        item = self.get(topic_id, with_relationship)
        if item is None:
            raise NotFoundError("TOPIC_NOT_FOUND", "topic not found")
        return item

    def create(self, name: Optional[str], description: Optional[str], cover: Optional[UploadFile] = None) -> int:
        topic = Topic(
            name=self._validate_name(name),
            description=self._validate_description(description),
            cover=self._cover_name(cover),
            follower_count=0,
        )
        self.db.add(topic)
        self.db.commit()
        self.db.refresh(topic)
        self._audit("create_topic", topic.topic_id)
        logger.info("topic created", extra={"topic_id": topic.topic_id, "user_id": self.viewer_id})
        return topic.topic_id

    def update(
        self,
        topic_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        cover: Optional[UploadFile] = None,
    ) -> None:
        topic = self._live_topic_or_fail(topic_id)
        changed: list[str] = []
        if name is not None:
            topic.name = self._validate_name(name)
            changed.append("name")
        if description is not None:
            topic.description = self._validate_description(description)
            changed.append("description")
        if cover is not None:
            topic.cover = self._cover_name(cover)
            changed.append("cover")
        if not changed:
            return

        self.db.add(topic)
        self.db.commit()
        self._audit("update_topic", topic_id, metadata={"fields": changed})
        logger.info("topic updated", extra={"topic_id": topic_id, "user_id": self.viewer_id})

    def delete(self, topic_id: int) -> None:
        topic = self._live_topic_or_fail(topic_id)
        topic.delete_time = datetime.now(timezone.utc)
        self.db.add(topic)
        self.db.commit()
        self._audit("delete_topic", topic_id)
        logger.info("topic moved to trash", extra={"topic_id": topic_id, "user_id": self.viewer_id})

    def delete_multiple(self, topic_ids: list[int]) -> int:
        if not topic_ids:
            return 0

        topics = list(
            self.db.scalars(
                select(Topic).where(Topic.topic_id.in_(topic_ids), Topic.delete_time.is_(None))
            )
        )
        now = datetime.now(timezone.utc)
        for topic in topics:
            topic.delete_time = now
            self.db.add(topic)
            self._audit("delete_topic", topic.topic_id, auto_commit=False)
        self.db.commit()
        logger.info(
            "topics moved to trash: %d of %d requested",
            len(topics),
            len(topic_ids),
            extra={"user_id": self.viewer_id},
        )
        return len(topics)

    def get_following(self, user_id: int, with_relationship: bool = False) -> dict[str, Any]:
        if self.db.get(User, user_id) is None:
            raise NotFoundError("USER_NOT_FOUND", "user not found")

        joined = (
            Follow.followable_type == FOLLOWABLE_TOPIC,
            Follow.user_id == user_id,
            Topic.delete_time.is_(None),
        )
        stmt = (
            select(Topic)
            .join(Follow, Follow.followable_id == Topic.topic_id)
            .where(*joined)
            .order_by(Follow.create_time.desc(), Follow.id.desc())
        )
        count_stmt = select(func.count()).select_from(Topic).join(
            Follow, Follow.followable_id == Topic.topic_id
        ).where(*joined)

        rows = list(self.db.scalars(self._paginate(stmt)))
        total = int(self.db.scalar(count_stmt) or 0)
        items = [self._topic_dict(row) for row in rows]
        if with_relationship:
            self._attach_topic_relationship(items)
        return self._page(items, total)

    def get_followers(self, topic_id: int, with_relationship: bool = False) -> dict[str, Any]:
        self._live_topic_or_fail(topic_id)

        joined = (
            Follow.followable_type == FOLLOWABLE_TOPIC,
            Follow.followable_id == topic_id,
        )
        stmt = (
            select(User)
            .join(Follow, Follow.user_id == User.user_id)
            .where(*joined)
            .order_by(Follow.create_time.desc(), Follow.id.desc())
        )
        count_stmt = select(func.count()).select_from(Follow).where(*joined)

        rows = list(self.db.scalars(self._paginate(stmt)))
        total = int(self.db.scalar(count_stmt) or 0)
        items = [UserOut.model_validate(row).model_dump() for row in rows]
        if with_relationship:
            for item in items:
                item["relationship"] = {"is_me": item["user_id"] == self.viewer_id}
        return self._page(items, total)

    def add_follow(self, user_id: int, topic_id: int) -> bool:
        self._live_topic_or_fail(topic_id)
        if self._find_follow(user_id, topic_id) is not None:
            return False

        self.db.add(Follow(user_id=user_id, followable_type=FOLLOWABLE_TOPIC, followable_id=topic_id))
        try:
            self.db.flush()
        except IntegrityError:
            # Lost a race against an identical follow request.
            self.db.rollback()
            return False

        self.db.execute(
            update(Topic)
            .where(Topic.topic_id == topic_id)
            .values(follower_count=Topic.follower_count + 1)
        )
        self.db.commit()

        self._audit("add_follow", topic_id, actor_id=user_id)
        return True

    def delete_follow(self, user_id: int, topic_id: int) -> bool:
        # Trashed topics can still be unfollowed.
        if self.db.get(Topic, topic_id) is None:
            raise NotFoundError("TOPIC_NOT_FOUND", "topic not found")

        result = self.db.execute(
            delete(Follow).where(
                Follow.user_id == user_id,
                Follow.followable_type == FOLLOWABLE_TOPIC,
                Follow.followable_id == topic_id,
            )
        )
        if not result.rowcount:
            self.db.rollback()
            return False

        self.db.execute(
            update(Topic)
            .where(Topic.topic_id == topic_id, Topic.follower_count > 0)
            .values(follower_count=Topic.follower_count - 1)
        )
        self.db.commit()
        self._audit("delete_follow", topic_id, actor_id=user_id)
        return True

    def get_follower_count(self, topic_id: int) -> int:
        count = self.db.scalar(select(Topic.follower_count).where(Topic.topic_id == topic_id))
        return int(count or 0)

    def _live_topic(self, topic_id: int) -> Optional[Topic]:
        return self.db.scalar(
            select(Topic).where(Topic.topic_id == topic_id, Topic.delete_time.is_(None))
        )

    def _live_topic_or_fail(self, topic_id: int) -> Topic:
        topic = self._live_topic(topic_id)
        if topic is None:
            raise NotFoundError("TOPIC_NOT_FOUND", "topic not found")
        return topic

    def _find_follow(self, user_id: int, topic_id: int) -> Optional[Follow]:
        return self.db.scalar(
            select(Follow).where(
                Follow.user_id == user_id,
                Follow.followable_type == FOLLOWABLE_TOPIC,
                Follow.followable_id == topic_id,
            )
        )

    def _attach_topic_relationship(self, items: list[dict[str, Any]]) -> None:
        followed: set[int] = set()
        topic_ids = [item["topic_id"] for item in items]
        if self.viewer_id is not None and topic_ids:
            followed = set(
                self.db.scalars(
                    select(Follow.followable_id).where(
                        Follow.user_id == self.viewer_id,
                        Follow.followable_type == FOLLOWABLE_TOPIC,
                        Follow.followable_id.in_(topic_ids),
                    )
                )
            )
        for item in items:
            item["relationship"] = {"is_following": item["topic_id"] in followed}

    def _paginate(self, stmt):
        return stmt.offset((self.paging.page - 1) * self.paging.page_size).limit(self.paging.page_size)

    def _page(self, items: list[dict[str, Any]], total: int) -> dict[str, Any]:
        return PageOut(
            items=items,
            page=self.paging.page,
            page_size=self.paging.page_size,
            total=total,
        ).model_dump()

    def _audit(
        self,
        action: str,
        topic_id: int,
        *,
        actor_id: Optional[int] = None,
        metadata: Optional[dict] = None,
        auto_commit: bool = True,
    ) -> None:
        actor = actor_id if actor_id is not None else self.viewer_id
        log_audit_event(
            self.db,
            actor_type="user",
            actor_id=str(actor) if actor is not None else "anonymous",
            tool="api",
            action=action,
            target_type="topic",
            target_id=str(topic_id),
            metadata=metadata,
            auto_commit=auto_commit,
        )

    @staticmethod
    def _topic_dict(topic: Topic) -> dict[str, Any]:
        return TopicOut.model_validate(topic).model_dump()

    @staticmethod
    def _validate_name(name: Optional[str]) -> str:
        value = (name or "").strip()
        if not value or len(value) > TOPIC_NAME_MAX:
            raise ValidationFailed(
                "TOPIC_NAME_INVALID",
                f"topic name must be 1-{TOPIC_NAME_MAX} characters",
            )
        return value

    @staticmethod
    def _validate_description(description: Optional[str]) -> str:
        value = (description or "").strip()
        if len(value) > TOPIC_DESCRIPTION_MAX:
            raise ValidationFailed(
                "TOPIC_DESCRIPTION_INVALID",
                f"topic description must be at most {TOPIC_DESCRIPTION_MAX} characters",
            )
        return value

    @staticmethod
    def _cover_name(cover: Optional[UploadFile]) -> Optional[str]:
        if cover is None or not cover.filename:
            return None
        return cover.filename
