from __future__ import annotations

from typing import Optional

from fastapi import Query

from forum.schemas import PageParams, TopicOrder

MAX_BATCH_IDS = 100


def id_list(raw: Optional[str], limit: int = MAX_BATCH_IDS) -> list[int]:
    """Parse ``"3,1,,x,3"`` into ``[3, 1]``.

    Blank and non-numeric items are skipped, duplicates keep their first
    position and at most ``limit`` ids are returned.
    """
    if not raw:
        return []
    ids: list[int] = []
    seen: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if not (part.isascii() and part.isdigit()) or len(part) > 18:
            continue
        value = int(part)
        if value <= 0 or value in seen:
            continue
        seen.add(value)
        ids.append(value)
        if len(ids) >= limit:
            break
    return ids


def page_params(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=15, ge=1, le=100),
    order: Optional[TopicOrder] = None,
) -> PageParams:
    return PageParams(page=page, page_size=page_size, order=order)
