from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from forum.config import settings
from forum.db import Base, build_engine, build_session_local, get_db
from forum.middleware.error_handler import RequestIdMiddleware, install_error_handlers
from forum.observability import setup_logging
from forum.routes.audit import build_router as build_audit_router
from forum.routes.topics import build_router as build_topics_router

logger = logging.getLogger(__name__)


def _build_runtime(database_url: str):
    engine = build_engine(database_url)
    session_local = build_session_local(engine)
    Base.metadata.create_all(bind=engine)
    return engine, session_local


def create_app(database_url: Optional[str] = None) -> FastAPI:
    setup_logging(settings.log_level, settings.log_format)

    runtime_db_url = database_url or settings.database_url
    engine, session_local = _build_runtime(runtime_db_url)

    def get_db_dep():
        yield from get_db(session_local)

    app = FastAPI(title="Forum Topic API")
    app.state.engine = engine
    app.state.session_local = session_local
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)
    install_error_handlers(app)
    app.include_router(build_topics_router(get_db_dep))
    app.include_router(build_audit_router(get_db_dep))

    @app.get("/health")
    def health():
        return {"ok": True}

    logger.info("forum app ready")
    return app
