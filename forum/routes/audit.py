from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from forum.responses import success
from forum.services.audit_service import list_audit_events
from forum.services.role_service import RoleService


def build_router(get_db_dep):
    router = APIRouter(prefix="/api/v1/audit", tags=["audit"])

    @router.get("/events")
    def list_events(
        request: Request,
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=20, ge=1, le=100),
        actor_id: Optional[str] = None,
        action: Optional[str] = None,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        db: Session = Depends(get_db_dep),
    ):
        RoleService(db, request).manager_id_or_fail()

        rows, total = list_audit_events(
            db,
            page=page,
            page_size=page_size,
            actor_id=actor_id,
            action=action,
            target_type=target_type,
            target_id=target_id,
        )
        items = [
            {
                "event_id": r.id,
                "occurred_at": r.occurred_at,
                "actor": {"type": r.actor_type, "id": r.actor_id},
                "tool": r.tool,
                "action": r.action,
                "target": {"type": r.target_type, "id": r.target_id},
                "metadata": r.metadata_json,
            }
            for r in rows
        ]
        return success({"items": items, "page": page, "page_size": page_size, "total": total})

    return router
