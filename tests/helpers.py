import uuid
from pathlib import Path
from typing import Optional

from fastapi.testclient import TestClient

from forum.app import create_app
from forum.services.user_service import upsert_user


def database_url(tmp_path: Path) -> str:
    return f"sqlite+pysqlite:///{tmp_path / 'forum-test.sqlite3'}"


def make_client(tmp_path: Path) -> TestClient:
    app = create_app(database_url(tmp_path))
    return TestClient(app)


def uniq(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:6]}"


def create_user(client: TestClient, *, manager: bool = False, prefix: str = "u") -> int:
    with client.app.state.session_local() as db:
        return upsert_user(db, uniq(prefix), is_manager=manager).user_id


def as_user(user_id: int) -> dict[str, str]:
    return {"X-User-Id": str(user_id)}


def create_topic(client: TestClient, manager_id: int, *, name: Optional[str] = None, description: str = "") -> int:
    resp = client.post(
        "/api/v1/topics",
        data={"name": name or uniq("t"), "description": description},
        headers=as_user(manager_id),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["topic_id"]
