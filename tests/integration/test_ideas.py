import uuid
import pytest


async def _pipeline(client):
    statuses = (await client.get("/api/v1/statuses/")).json()
    channels = (await client.get("/api/v1/channels/")).json()
    return {s["name"]: s for s in statuses}, {c["name"]: c for c in channels}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_first_request_seeds_pipeline(client):
    statuses, channels = await _pipeline(client)
    assert list(statuses) == ["Initial", "Script Write", "Record", "Edit", "Upload"]
    assert set(channels) == {"Tech Reviews", "Vlog Daily"}
    # no duplicates on later requests
    again, _ = await _pipeline(client)
    assert len(again) == 5


@pytest.mark.asyncio
@pytest.mark.integration
async def test_idea_create_defaults_and_validation(client):
    statuses, channels = await _pipeline(client)
    resp = await client.post("/api/v1/ideas/", json={"title": "  Desk setup  ", "tags": ["desk", "desk", " "]})
    assert resp.status_code == 201, resp.text
    idea = resp.json()
    assert idea["title"] == "Desk setup"
    assert idea["tags"] == ["desk"]
    assert idea["channel_id"] == channels["Tech Reviews"]["id"]
    assert idea["status_id"] == statuses["Initial"]["id"]
    assert idea["priority"] == "Medium"

    blank = await client.post("/api/v1/ideas/", json={"title": "   "})
    assert blank.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_idea_patch_tracks_completion(client):
    statuses, _ = await _pipeline(client)
    idea = (await client.post("/api/v1/ideas/", json={"title": "Unboxing Video"})).json()
    done = await client.patch(f"/api/v1/ideas/{idea['id']}", json={"status_id": statuses["Upload"]["id"]})
    assert done.status_code == 200, done.text
    assert done.json()["completed_at"] is not None
    back = await client.patch(f"/api/v1/ideas/{idea['id']}", json={"status_id": statuses["Edit"]["id"]})
    assert back.json()["completed_at"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_idea_not_found(client):
    random_id = uuid.uuid4()
    resp = await client.patch(f"/api/v1/ideas/{random_id}", json={"title": "won't work"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Idea not found"
    assert (await client.get(f"/api/v1/ideas/{random_id}")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_ideas_are_scoped_per_user(client):
    idea = (await client.post("/api/v1/ideas/", json={"title": "mine"})).json()
    other = {"X-User-Id": str(uuid.uuid4())}
    resp = await client.get(f"/api/v1/ideas/{idea['id']}", headers=other)
    assert resp.status_code == 404
    listing = await client.get("/api/v1/ideas/", headers=other)
    assert listing.json() == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_bin_restore_and_empty(client):
    keep = (await client.post("/api/v1/ideas/", json={"title": "keep"})).json()
    drop = (await client.post("/api/v1/ideas/", json={"title": "drop", "notes": "n"})).json()

    binned = await client.delete(f"/api/v1/ideas/{drop['id']}")
    assert binned.status_code == 200 and binned.json()["is_deleted"] is True
    active = (await client.get("/api/v1/ideas/")).json()
    assert [i["id"] for i in active] == [keep["id"]]
    trash = (await client.get("/api/v1/trash/")).json()
    assert [i["id"] for i in trash] == [drop["id"]]

    restored = (await client.post(f"/api/v1/ideas/{drop['id']}/restore")).json()
    unchanged = {k: v for k, v in drop.items() if k != "updated_at"}
    assert {k: v for k, v in restored.items() if k != "updated_at"} == unchanged

    await client.delete(f"/api/v1/ideas/{drop['id']}")
    emptied = await client.post("/api/v1/trash/empty")
    assert emptied.json() == {"status": "ok", "purged_ideas": 1}
    everything = (await client.get("/api/v1/ideas/", params={"include_deleted": True})).json()
    assert [i["id"] for i in everything] == [keep["id"]]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_permanent_delete_is_idempotent(client):
    idea = (await client.post("/api/v1/ideas/", json={"title": "gone"})).json()
    first = await client.delete(f"/api/v1/ideas/{idea['id']}/permanent")
    second = await client.delete(f"/api/v1/ideas/{idea['id']}/permanent")
    assert first.status_code == second.status_code == 204


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_filters(client):
    statuses, channels = await _pipeline(client)
    await client.post("/api/v1/ideas/", json={"title": "a", "channel_id": channels["Vlog Daily"]["id"]})
    await client.post("/api/v1/ideas/", json={"title": "b", "status_id": statuses["Record"]["id"]})
    by_channel = (await client.get("/api/v1/ideas/", params={"channel_id": channels["Vlog Daily"]["id"]})).json()
    assert [i["title"] for i in by_channel] == ["a"]
    by_status = (await client.get("/api/v1/ideas/", params={"status_id": statuses["Record"]["id"]})).json()
    assert [i["title"] for i in by_status] == ["b"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_idea_rejects_another_users_stage_and_channel(client):
    await _pipeline(client)
    other = {"X-User-Id": str(uuid.uuid4())}
    other_stage = (await client.get("/api/v1/statuses/", headers=other)).json()[-1]
    other_channel = (await client.get("/api/v1/channels/", headers=other)).json()[0]

    resp = await client.post("/api/v1/ideas/", json={"title": "Borrowed", "status_id": other_stage["id"]})
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Unknown status_id"

    idea = (await client.post("/api/v1/ideas/", json={"title": "Mine"})).json()
    moved = await client.patch(f"/api/v1/ideas/{idea['id']}", json={"channel_id": other_channel["id"]})
    assert moved.status_code == 422
    assert moved.json()["detail"] == "Unknown channel_id"
    assert len((await client.get("/api/v1/ideas/")).json()) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_adding_a_stage_clears_stale_completion(client):
    statuses, _ = await _pipeline(client)
    idea = (await client.post("/api/v1/ideas/", json={"title": "Final cut", "status_id": statuses["Upload"]["id"]})).json()
    assert idea["completed_at"] is not None
    resp = await client.post("/api/v1/statuses/", json={"name": "Publish"})
    assert resp.status_code == 201, resp.text
    reloaded = (await client.get(f"/api/v1/ideas/{idea['id']}")).json()
    assert reloaded["completed_at"] is None
