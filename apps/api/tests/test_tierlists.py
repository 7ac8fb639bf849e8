import pytest
from sqlalchemy.future import select

from models.tier import Tier
from models.tier_list import TierList
from schemas import POOL_TIER_NAME

ANON = "anon-device-1"


def _tier(name, *urls, color="#ff7f7f"):
    return {"name": name, "color": color, "items": [{"mediaUrl": url, "mediaType": "IMAGE"} for url in urls]}


def _body(**overrides):
    body = {
        "title": "Snacks",
        "description": "Ranked",
        "tiers": [_tier("S", "https://cdn.example.com/a.png"), _tier("A")],
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_create_requires_some_identity(api_client):
    response = await api_client.post("/tierlists", json=_body())
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_rejects_malformed_body_as_invalid_input(api_client):
    response = await api_client.post("/tierlists", json={"title": "x", "anonymousId": ANON})
    assert response.status_code == 400

    blank = await api_client.post("/tierlists", json=_body(title="   ", anonymousId=ANON))
    assert blank.status_code == 400


@pytest.mark.asyncio
async def test_authenticated_create_defaults_public_and_orders_tiers(api_client, make_user):
    user_id, headers = await make_user()

    response = await api_client.post("/tierlists", json=_body(), headers=headers)
    assert response.status_code == 201
    payload = response.json()

    assert payload["isPublic"] is True
    assert payload["userId"] == user_id
    assert payload["isAnonymous"] is False
    assert [(tier["name"], tier["order"]) for tier in payload["tiers"]] == [("S", 0), ("A", 1)]
    assert payload["tiers"][0]["items"][0]["mediaUrl"] == "https://cdn.example.com/a.png"


@pytest.mark.asyncio
async def test_anonymous_list_is_private_and_cannot_be_published(api_client, session_maker):
    rejected = await api_client.post("/tierlists", json=_body(anonymousId=ANON, isPublic=True))
    assert rejected.status_code == 401

    created = await api_client.post("/tierlists", json=_body(anonymousId=ANON))
    assert created.status_code == 201
    tier_list_id = created.json()["id"]
    assert created.json()["isPublic"] is False
    assert "anonymousId" not in created.json()

    publish = await api_client.put(
        f"/tierlists/{tier_list_id}", json={"isPublic": True, "anonymousId": ANON}
    )
    assert publish.status_code == 401

    retitle = await api_client.put(
        f"/tierlists/{tier_list_id}", json={"title": "Renamed", "isPublic": False, "anonymousId": ANON}
    )
    assert retitle.status_code == 200

    async with session_maker() as session:
        row = (await session.execute(select(TierList).where(TierList.id == tier_list_id))).scalar_one()
        assert row.title == "Renamed"
        assert row.is_public is False
        assert row.anonymous_id == ANON


@pytest.mark.asyncio
async def test_anonymous_read_requires_matching_header(api_client):
    created = await api_client.post("/tierlists", json=_body(anonymousId=ANON))
    tier_list_id = created.json()["id"]

    own = await api_client.get(f"/tierlists/{tier_list_id}", headers={"X-Anonymous-Id": ANON})
    assert own.status_code == 200

    other = await api_client.get(f"/tierlists/{tier_list_id}", headers={"X-Anonymous-Id": "someone-else"})
    assert other.status_code == 403

    missing = await api_client.get("/tierlists/does-not-exist")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_private_user_list_access(api_client, make_user):
    _, owner_headers = await make_user("owner")
    _, other_headers = await make_user("other")

    created = await api_client.post("/tierlists", json=_body(isPublic=False), headers=owner_headers)
    tier_list_id = created.json()["id"]

    assert (await api_client.get(f"/tierlists/{tier_list_id}")).status_code == 401
    assert (await api_client.get(f"/tierlists/{tier_list_id}", headers=other_headers)).status_code == 403
    assert (await api_client.get(f"/tierlists/{tier_list_id}", headers=owner_headers)).status_code == 200

    update = await api_client.put(f"/tierlists/{tier_list_id}", json={"title": "Mine"}, headers=other_headers)
    assert update.status_code == 403


@pytest.mark.asyncio
async def test_update_replaces_all_tiers_and_keeps_omitted_fields(api_client, make_user, session_maker):
    _, headers = await make_user()
    created = await api_client.post("/tierlists", json=_body(), headers=headers)
    tier_list_id = created.json()["id"]

    response = await api_client.put(
        f"/tierlists/{tier_list_id}",
        json={"tiers": [_tier("Top", "https://cdn.example.com/b.png", color="#4ade80")]},
        headers=headers,
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["title"] == "Snacks"
    assert payload["description"] == "Ranked"
    assert [tier["name"] for tier in payload["tiers"]] == ["Top"]

    untouched = await api_client.put(f"/tierlists/{tier_list_id}", json={"title": "Snacks v2"}, headers=headers)
    assert [tier["name"] for tier in untouched.json()["tiers"]] == ["Top"]

    async with session_maker() as session:
        tiers = (await session.execute(select(Tier).where(Tier.tier_list_id == tier_list_id))).scalars().all()
        assert [tier.name for tier in tiers] == ["Top"]


@pytest.mark.asyncio
async def test_pool_round_trip(api_client):
    body = _body(
        anonymousId=ANON,
        tiers=[_tier("S", "https://cdn.example.com/itemA.png"), _tier(POOL_TIER_NAME, "https://cdn.example.com/itemB.png")],
    )
    created = await api_client.post("/tierlists", json=body)
    tier_list_id = created.json()["id"]

    loaded = await api_client.get(f"/tierlists/{tier_list_id}", headers={"X-Anonymous-Id": ANON})
    tiers = loaded.json()["tiers"]

    assert [(tier["name"], [item["mediaUrl"] for item in tier["items"]]) for tier in tiers] == [
        ("S", ["https://cdn.example.com/itemA.png"]),
        (POOL_TIER_NAME, ["https://cdn.example.com/itemB.png"]),
    ]
    assert tiers[1]["order"] == 9999


@pytest.mark.asyncio
async def test_delete_removes_list(api_client, make_user):
    _, headers = await make_user()
    created = await api_client.post("/tierlists", json=_body(), headers=headers)
    tier_list_id = created.json()["id"]
    await api_client.post(f"/tierlists/{tier_list_id}/vote", json={"value": 1}, headers=headers)
    await api_client.post(f"/tierlists/{tier_list_id}/comments", json={"content": "nice"}, headers=headers)

    unauthorized = await api_client.delete(f"/tierlists/{tier_list_id}")
    assert unauthorized.status_code == 401

    response = await api_client.delete(f"/tierlists/{tier_list_id}", headers=headers)
    assert response.status_code == 200
    assert (await api_client.get(f"/tierlists/{tier_list_id}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_list_mine_by_session_or_anonymous_header(api_client, make_user):
    _, headers = await make_user()
    await api_client.post("/tierlists", json=_body(title="Mine"), headers=headers)
    await api_client.post("/tierlists", json=_body(title="Anon", anonymousId=ANON))

    mine = await api_client.get("/tierlists", headers=headers)
    assert [row["title"] for row in mine.json()] == ["Mine"]

    anon = await api_client.get("/tierlists", headers={"X-Anonymous-Id": ANON})
    assert [row["title"] for row in anon.json()] == ["Anon"]

    assert (await api_client.get("/tierlists")).status_code == 401


@pytest.mark.asyncio
async def test_clone_template_pools_every_item_in_order(api_client, make_user):
    _, headers = await make_user()
    source = await api_client.post(
        "/tierlists",
        json=_body(
            tiers=[_tier("S", "https://cdn.example.com/p.png"), _tier("A", "https://cdn.example.com/q.png")]
        ),
        headers=headers,
    )
    source_id = source.json()["id"]

    response = await api_client.post(f"/tierlists/{source_id}/use-template")
    assert response.status_code == 201
    cloned = response.json()
    assert cloned["anonymousId"].startswith("anon-")

    loaded = await api_client.get(f"/tierlists/{cloned['id']}", headers={"X-Anonymous-Id": cloned["anonymousId"]})
    payload = loaded.json()
    assert payload["isPublic"] is False
    assert [(tier["name"], [item["mediaUrl"] for item in tier["items"]]) for tier in payload["tiers"]] == [
        ("S", []),
        ("A", []),
        (POOL_TIER_NAME, ["https://cdn.example.com/p.png", "https://cdn.example.com/q.png"]),
    ]


@pytest.mark.asyncio
async def test_clone_of_private_list_is_forbidden(api_client, make_user):
    _, headers = await make_user()
    created = await api_client.post("/tierlists", json=_body(isPublic=False), headers=headers)

    response = await api_client.post(f"/tierlists/{created.json()['id']}/use-template", headers=headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_authenticated_clone_is_owned_by_user(api_client, make_user):
    user_id, headers = await make_user()
    created = await api_client.post("/tierlists", json=_body(), headers=headers)

    response = await api_client.post(f"/tierlists/{created.json()['id']}/use-template", headers=headers)
    cloned = response.json()
    assert cloned["anonymousId"] is None

    loaded = await api_client.get(f"/tierlists/{cloned['id']}", headers=headers)
    assert loaded.json()["userId"] == user_id
