from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from forum.models import AuditEvent


def log_audit_event(
    db: Session,
    *,
    actor_type: str,
    actor_id: str,
    tool: str,
    action: str,
    target_type: str,
    target_id: str,
    metadata: Optional[dict] = None,
    auto_commit: bool = True,
) -> AuditEvent:
    event = AuditEvent(
        id=f"aud_{uuid.uuid4().hex[:12]}",
        actor_type=actor_type,
        actor_id=actor_id,
        tool=tool,
        action=action,
        target_type=target_type,
        target_id=target_id,
        metadata_json=metadata or {},
    )
    db.add(event)
    if auto_commit:
        db.commit()
        db.refresh(event)
    else:
        db.flush()
    return event


def list_audit_events(
    db: Session,
    *,
    page: int,
    page_size: int,
    actor_id: Optional[str] = None,
    action: Optional[str] = None,
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
) -> tuple[list[AuditEvent], int]:
    stmt = select(AuditEvent)
    count_stmt = select(func.count()).select_from(AuditEvent)

    if actor_id:
        stmt = stmt.where(AuditEvent.actor_id == actor_id)
        count_stmt = count_stmt.where(AuditEvent.actor_id == actor_id)
    if action:
        stmt = stmt.where(AuditEvent.action == action)
        count_stmt = count_stmt.where(AuditEvent.action == action)
    if target_type:
        stmt = stmt.where(AuditEvent.target_type == target_type)
        count_stmt = count_stmt.where(AuditEvent.target_type == target_type)
    if target_id:
        stmt = stmt.where(AuditEvent.target_id == target_id)
        count_stmt = count_stmt.where(AuditEvent.target_id == target_id)

    stmt = stmt.order_by(desc(AuditEvent.occurred_at), desc(AuditEvent.id))
    stmt = stmt.offset((page - 1) * page_size).limit(page_size)
    items = list(db.scalars(stmt))
    total = int(db.scalar(count_stmt) or 0)
    return items, total
