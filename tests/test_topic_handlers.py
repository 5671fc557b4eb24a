"""Handlers hand the right arguments to the services and nothing more."""

from forum.services.topic_service import TopicService
from tests.helpers import as_user, create_user, make_client

EMPTY_PAGE = {"items": [], "page": 1, "page_size": 15, "total": 0}


def _record(monkeypatch, name, result=None):
    calls = []

    def fake(self, *args):
        calls.append(args)
        return result

    monkeypatch.setattr(TopicService, name, fake)
    return calls


def test_get_list_passes_empty_filters(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    calls = _record(monkeypatch, "get_list", EMPTY_PAGE)

    resp = client.get("/api/v1/topics")
    assert resp.json() == {"code": 0, "data": EMPTY_PAGE}
    assert calls == [({}, True)]


def test_deleted_list_passes_trash_filter(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    manager_id = create_user(client, manager=True)
    calls = _record(monkeypatch, "get_list", EMPTY_PAGE)

    client.get("/api/v1/trash/topics", headers=as_user(manager_id))
    assert calls == [({"is_deleted": True}, True)]


def test_create_then_reads_back_created_topic(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    manager_id = create_user(client, manager=True)
    created = _record(monkeypatch, "create", 42)
    fetched = _record(monkeypatch, "get", {"topic_id": 42})

    resp = client.post(
        "/api/v1/topics",
        data={"name": "Rust", "description": "systems"},
        headers=as_user(manager_id),
    )
    assert resp.status_code == 201
    assert resp.json()["data"] == {"topic_id": 42}
    assert created == [("Rust", "systems", None)]
    assert fetched == [(42, True)]


def test_update_passes_missing_fields_as_none(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    manager_id = create_user(client, manager=True)
    updated = _record(monkeypatch, "update")
    fetched = _record(monkeypatch, "get", {"topic_id": 7})

    client.patch("/api/v1/topics/7", data={"description": "new"}, headers=as_user(manager_id))
    assert updated == [(7, None, "new", None)]
    assert fetched == [(7, True)]


def test_get_one_uses_get_or_fail(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    calls = _record(monkeypatch, "get_or_fail", {"topic_id": 3})

    assert client.get("/api/v1/topics/3").json()["data"] == {"topic_id": 3}
    assert calls == [(3, True)]


def test_delete_one_and_multiple(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    manager_id = create_user(client, manager=True)
    single = _record(monkeypatch, "delete")
    multiple = _record(monkeypatch, "delete_multiple", 0)

    client.delete("/api/v1/topics/9", headers=as_user(manager_id))
    client.delete("/api/v1/topics?topic_id=4,2,,4,x", headers=as_user(manager_id))
    assert single == [(9,)]
    assert multiple == [([4, 2],)]


def test_manager_check_runs_before_any_mutation(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    member_id = create_user(client)
    touched = [
        _record(monkeypatch, name)
        for name in ("create", "update", "delete", "delete_multiple", "get_list")
    ]

    headers = as_user(member_id)
    responses = [
        client.post("/api/v1/topics", data={"name": "x"}, headers=headers),
        client.patch("/api/v1/topics/1", data={"name": "x"}, headers=headers),
        client.delete("/api/v1/topics/1", headers=headers),
        client.delete("/api/v1/topics?topic_id=1", headers=headers),
        client.get("/api/v1/trash/topics", headers=headers),
    ]
    assert [resp.status_code for resp in responses] == [403] * 5
    assert all(calls == [] for calls in touched)


def test_follow_handlers_pass_caller_and_topic(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    reader = create_user(client)
    added = _record(monkeypatch, "add_follow", True)
    removed = _record(monkeypatch, "delete_follow", True)
    counted = _record(monkeypatch, "get_follower_count", 7)

    add = client.post("/api/v1/topics/5/followers", headers=as_user(reader))
    remove = client.delete("/api/v1/topics/5/followers", headers=as_user(reader))
    assert add.json()["data"] == {"follower_count": 7}
    assert remove.json()["data"] == {"follower_count": 7}
    assert added == [(reader, 5)]
    assert removed == [(reader, 5)]
    assert counted == [(5,), (5,)]


def test_following_and_followers_handlers(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    reader = create_user(client)
    following = _record(monkeypatch, "get_following", EMPTY_PAGE)
    followers = _record(monkeypatch, "get_followers", EMPTY_PAGE)

    client.get("/api/v1/users/11/following_topics")
    client.get("/api/v1/user/following_topics", headers=as_user(reader))
    client.get("/api/v1/topics/6/followers")
    assert following == [(11, True), (reader, True)]
    assert followers == [(6, True)]


def test_trash_stubs_call_no_service(tmp_path, monkeypatch):
    client = make_client(tmp_path)
    touched = [
        _record(monkeypatch, name)
        for name in ("get_list", "delete", "delete_multiple", "get", "get_or_fail", "update")
    ]

    for resp in (
        client.post("/api/v1/trash/topics"),
        client.delete("/api/v1/trash/topics"),
        client.post("/api/v1/trash/topics/1"),
        client.delete("/api/v1/trash/topics/1"),
    ):
        assert resp.status_code == 200
        assert resp.content == b""
    assert all(calls == [] for calls in touched)
