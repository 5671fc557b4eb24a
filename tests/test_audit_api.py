from tests.helpers import as_user, create_topic, create_user, make_client


def test_topic_mutations_are_audited(tmp_path):
    client = make_client(tmp_path)
    manager_id = create_user(client, manager=True)
    reader = create_user(client)
    topic_id = create_topic(client, manager_id)
    client.patch(f"/api/v1/topics/{topic_id}", data={"name": "Renamed"}, headers=as_user(manager_id))
    client.post(f"/api/v1/topics/{topic_id}/followers", headers=as_user(reader))
    client.delete(f"/api/v1/topics/{topic_id}/followers", headers=as_user(reader))
    client.delete(f"/api/v1/topics/{topic_id}", headers=as_user(manager_id))

    resp = client.get(
        f"/api/v1/audit/events?target_type=topic&target_id={topic_id}&page_size=100",
        headers=as_user(manager_id),
    )
    assert resp.status_code == 200
    page = resp.json()["data"]
    actions = sorted(item["action"] for item in page["items"])
    assert actions == sorted(
        ["create_topic", "update_topic", "add_follow", "delete_follow", "delete_topic"]
    )
    assert page["total"] == 5

    follow_events = [item for item in page["items"] if item["action"] == "add_follow"]
    assert follow_events[0]["actor"] == {"type": "user", "id": str(reader)}

    updates = [item for item in page["items"] if item["action"] == "update_topic"]
    assert updates[0]["metadata"] == {"fields": ["name"]}


def test_repeated_follow_is_audited_once(tmp_path):
    client = make_client(tmp_path)
    manager_id = create_user(client, manager=True)
    reader = create_user(client)
    topic_id = create_topic(client, manager_id)
    for _ in range(2):
        client.post(f"/api/v1/topics/{topic_id}/followers", headers=as_user(reader))

    page = client.get(
        f"/api/v1/audit/events?action=add_follow&actor_id={reader}",
        headers=as_user(manager_id),
    ).json()["data"]
    assert page["total"] == 1


def test_audit_events_are_manager_only(tmp_path):
    client = make_client(tmp_path)
    member_id = create_user(client)

    assert client.get("/api/v1/audit/events").status_code == 401
    assert client.get("/api/v1/audit/events", headers=as_user(member_id)).status_code == 403
