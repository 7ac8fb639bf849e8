"""Reset the demo tier lists to blank templates.

Every ranked item is moved into the list's ``__POOL__`` tier (created when
missing), after whatever the pool already holds.

Usage: python scripts/reset_demo_templates.py
"""

import asyncio
import os
import sys
from typing import Iterable

# Add parent dir to path to find the app modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from database import async_session_maker, dispose_db
from models.tier import Tier
from models.tier_list import TierList
from schemas import POOL_TIER_COLOR, POOL_TIER_NAME, POOL_TIER_ORDER
from scripts.seed_demo import DEMO_TITLES


async def reset_tier_list(session: AsyncSession, tier_list: TierList) -> int:
    """Move ranked items of one list into its pool. Returns how many moved."""
    pool = next((tier for tier in tier_list.tiers if tier.name == POOL_TIER_NAME), None)
    if pool is None:
        pool = Tier(name=POOL_TIER_NAME, color=POOL_TIER_COLOR, order=POOL_TIER_ORDER, items=[])
        tier_list.tiers.append(pool)

    ranked = [
        item
        for tier in sorted(tier_list.tiers, key=lambda row: row.order)
        if tier is not pool
        for item in sorted(tier.items, key=lambda row: row.order)
    ]
    next_order = max((item.order for item in pool.items), default=-1) + 1
    for offset, item in enumerate(ranked):
        item.order = next_order + offset
        pool.items.append(item)
    await session.flush()
    return len(ranked)


async def reset_demo_templates(session: AsyncSession, titles: Iterable[str] = DEMO_TITLES) -> int:
    moved_total = 0
    for title in titles:
        result = await session.execute(
            select(TierList)
            .where(TierList.title == title)
            .options(selectinload(TierList.tiers).selectinload(Tier.items))
        )
        tier_list = result.scalars().first()
        if tier_list is None:
            print(f"⚠️ Not found: {title}")
            continue
        moved = await reset_tier_list(session, tier_list)
        moved_total += moved
        print(f"✅ Reset: {title} ({moved} items moved to pool)")
    await session.commit()
    return moved_total


async def main() -> None:
    print("🧹 Resetting demo tier lists to blank templates...")
    try:
        async with async_session_maker() as session:
            await reset_demo_templates(session)
    finally:
        await dispose_db()
    print("🎉 Reset completed!")


if __name__ == "__main__":
    asyncio.run(main())
