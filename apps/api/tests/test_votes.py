import pytest
from sqlalchemy import func
from sqlalchemy.future import select

from models.vote import Vote
from services.access import Requester
from services.errors import AlreadyExistsError
from services.votes import cast_vote_service


async def _public_list(api_client, headers):
    response = await api_client.post(
        "/tierlists",
        json={"title": "Votes", "tiers": [{"name": "S", "items": []}]},
        headers=headers,
    )
    return response.json()["id"]


@pytest.mark.asyncio
async def test_vote_toggle_flip_and_score(api_client, make_user, session_maker):
    _, headers = await make_user()
    tier_list_id = await _public_list(api_client, headers)

    first = await api_client.post(f"/tierlists/{tier_list_id}/vote", json={"value": 1, "anonymousId": "anon-1"})
    assert first.json() == {"message": "Vote recorded", "userVote": 1}

    flipped = await api_client.post(f"/tierlists/{tier_list_id}/vote", json={"value": -1, "anonymousId": "anon-1"})
    assert flipped.json() == {"message": "Vote updated", "userVote": -1}

    await api_client.post(f"/tierlists/{tier_list_id}/vote", json={"value": 1}, headers=headers)

    status = await api_client.get(f"/tierlists/{tier_list_id}/vote", params={"anonymousId": "anon-1"})
    assert status.json() == {"score": 0, "upvotes": 1, "downvotes": 1, "userVote": -1}

    removed = await api_client.post(f"/tierlists/{tier_list_id}/vote", json={"value": -1, "anonymousId": "anon-1"})
    assert removed.json() == {"message": "Vote removed", "userVote": None}

    async with session_maker() as session:
        count = (await session.execute(select(func.count(Vote.id)))).scalar()
        score = (await session.execute(select(func.sum(Vote.value)))).scalar()
    assert count == 1
    assert score == 1

    mine = await api_client.get(f"/tierlists/{tier_list_id}/vote", headers=headers)
    assert mine.json()["userVote"] == 1
    assert mine.json()["score"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [0, 2, -2, "up", True, "1", "-1", 1.0])
async def test_vote_rejects_bad_values(api_client, make_user, value):
    _, headers = await make_user()
    tier_list_id = await _public_list(api_client, headers)

    response = await api_client.post(f"/tierlists/{tier_list_id}/vote", json={"value": value}, headers=headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_vote_requires_identity_and_existing_list(api_client, make_user):
    _, headers = await make_user()
    tier_list_id = await _public_list(api_client, headers)

    anonymous = await api_client.post(f"/tierlists/{tier_list_id}/vote", json={"value": 1})
    assert anonymous.status_code == 400
    assert anonymous.json()["detail"] == "Anonymous id required"

    missing = await api_client.post("/tierlists/nope/vote", json={"value": 1, "anonymousId": "anon-1"})
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_unique_constraint_race_surfaces_as_already_exists(api_client, make_user, session_maker, monkeypatch):
    _, headers = await make_user()
    tier_list_id = await _public_list(api_client, headers)

    async with session_maker() as session:
        session.add(Vote(tier_list_id=tier_list_id, anonymous_id="anon-race", value=1))
        await session.commit()

    # Simulate the competing insert landing between our lookup and our insert.
    from services import votes as votes_module

    monkeypatch.setattr(votes_module, "_identity_filter", lambda requester: Vote.id == "no-such-vote")

    async with session_maker() as session:
        with pytest.raises(AlreadyExistsError):
            await cast_vote_service(tier_list_id, 1, Requester(anonymous_token="anon-race"), session)
