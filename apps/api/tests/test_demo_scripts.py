import pytest
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from models.tier import Tier
from models.tier_list import TierList
from schemas import POOL_TIER_NAME
from scripts.reset_demo_templates import reset_demo_templates
from scripts.seed_demo import DEMO_TITLES, seed_demo


async def _load(session, title):
    result = await session.execute(
        select(TierList)
        .where(TierList.title == title)
        .options(selectinload(TierList.tiers).selectinload(Tier.items))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_seed_is_idempotent_and_ownerless(session_maker):
    async with session_maker() as session:
        assert await seed_demo(session) == len(DEMO_TITLES)
    async with session_maker() as session:
        assert await seed_demo(session) == 0

    async with session_maker() as session:
        games = await _load(session, "Best Video Games Ever")
        assert games.is_public is True
        assert games.user_id is None
        assert games.anonymous_id is None
        assert [tier.name for tier in sorted(games.tiers, key=lambda row: row.order)] == ["S", "A", "B", "C"]


@pytest.mark.asyncio
async def test_reset_moves_ranked_items_into_pool(session_maker):
    async with session_maker() as session:
        await seed_demo(session)

    async with session_maker() as session:
        moved = await reset_demo_templates(session, ["Pizza Toppings Tier List", "Missing list"])
    assert moved == 6

    async with session_maker() as session:
        pizza = await _load(session, "Pizza Toppings Tier List")
        tiers = {tier.name: tier for tier in pizza.tiers}
        assert all(not tiers[name].items for name in ("S", "A", "B", "D"))
        pool_labels = [item.label for item in sorted(tiers[POOL_TIER_NAME].items, key=lambda row: row.order)]
        assert pool_labels == ["Pepperoni", "Mozzarella", "Mushrooms", "Italian Sausage", "Olives", "Pineapple"]

    async with session_maker() as session:
        assert await reset_demo_templates(session, ["Pizza Toppings Tier List"]) == 0


@pytest.mark.asyncio
async def test_demo_list_is_clonable_but_not_editable(api_client, session_maker):
    async with session_maker() as session:
        await seed_demo(session)
        games = await _load(session, "Best Video Games Ever")

    update = await api_client.put(f"/tierlists/{games.id}", json={"title": "Mine now"}, headers={"X-Anonymous-Id": "x"})
    assert update.status_code == 403

    cloned = await api_client.post(f"/tierlists/{games.id}/use-template")
    assert cloned.status_code == 201
