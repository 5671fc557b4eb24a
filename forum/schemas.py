from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TopicOrder = Literal[
    "topic_id",
    "-topic_id",
    "follower_count",
    "-follower_count",
    "create_time",
    "-create_time",
    "delete_time",
    "-delete_time",
]

TOPIC_NAME_MAX = 20
TOPIC_DESCRIPTION_MAX = 1000


class PageParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=15, ge=1, le=100)
    order: Optional[TopicOrder] = None


class TopicOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    topic_id: int
    name: str
    description: str
    cover: Optional[str]
    follower_count: int
    create_time: datetime
    update_time: datetime
    delete_time: Optional[datetime]


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str
    create_time: datetime


class PageOut(BaseModel):
    items: list[dict[str, Any]]
    page: int
    page_size: int
    total: int
