"""Read-only aggregations for explore, top, profile and saved pages."""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from config import settings
from models.saved_tier_list import SavedTierList
from models.tier_list import TierList
from models.user import User
from models.vote import Vote
from services.errors import NotFoundError
from services.tierlists import collect_counts, serialize_tier_list_summary, serialize_user_public


def _card(tier_list: TierList, counts: Dict[str, int]) -> Dict[str, Any]:
    payload = serialize_tier_list_summary(tier_list)
    payload["user"] = serialize_user_public(tier_list.user, include_id=False)
    payload["voteScore"] = counts["voteScore"]
    payload["_count"] = {
        "votes": counts["votes"],
        "comments": counts["comments"],
        "likes": counts["likes"],
    }
    return payload


async def list_public_tier_lists_service(
    db: AsyncSession,
    *,
    limit: int = 0,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """Most recent public lists, one page at a time."""
    page_size = min(max(int(limit or settings.PUBLIC_LIST_LIMIT), 1), settings.PUBLIC_LIST_LIMIT)
    result = await db.execute(
        select(TierList)
        .where(TierList.is_public.is_(True))
        .options(selectinload(TierList.user))
        .order_by(TierList.created_at.desc())
        .offset(max(int(offset), 0))
        .limit(page_size)
    )
    tier_lists = result.scalars().all()
    counts = await collect_counts(db, [row.id for row in tier_lists])
    return [_card(row, counts[row.id]) for row in tier_lists]


async def list_top_tier_lists_service(db: AsyncSession, *, limit: int) -> List[Dict[str, Any]]:
    """Public lists sorted by summed vote value, highest first."""
    score = func.coalesce(func.sum(Vote.value), 0).label("score")
    result = await db.execute(
        select(TierList, score)
        .outerjoin(Vote, Vote.tier_list_id == TierList.id)
        .where(TierList.is_public.is_(True))
        .options(selectinload(TierList.user))
        .group_by(TierList.id)
        .order_by(score.desc(), TierList.created_at.desc())
        .limit(max(int(limit), 1))
    )
    tier_lists = [row[0] for row in result.all()]
    counts = await collect_counts(db, [row.id for row in tier_lists])
    return [_card(row, counts[row.id]) for row in tier_lists]


async def get_user_profile_service(username: str, db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User not found")

    total_result = await db.execute(select(func.count(TierList.id)).where(TierList.user_id == user.id))
    total_tier_lists = int(total_result.scalar() or 0)

    lists_result = await db.execute(
        select(TierList)
        .where(TierList.user_id == user.id, TierList.is_public.is_(True))
        .order_by(TierList.created_at.desc())
    )
    tier_lists = lists_result.scalars().all()
    counts = await collect_counts(db, [row.id for row in tier_lists])

    cards = []
    total_vote_score = 0
    total_comments = 0
    for tier_list in tier_lists:
        row_counts = counts[tier_list.id]
        total_vote_score += row_counts["voteScore"]
        total_comments += row_counts["comments"]
        card = serialize_tier_list_summary(tier_list)
        card["voteScore"] = row_counts["voteScore"]
        card["_count"] = {"votes": row_counts["votes"], "comments": row_counts["comments"]}
        cards.append(card)

    return {
        "username": user.username,
        "imageUrl": user.image_url,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "tierlists": cards,
        "stats": {
            "totalTierlists": total_tier_lists,
            "totalVoteScore": total_vote_score,
            "totalComments": total_comments,
        },
    }


async def list_saved_tier_lists_service(user_id: str, db: AsyncSession) -> List[Dict[str, Any]]:
    """Bookmarks the caller can still read: public lists or their own."""
    result = await db.execute(
        select(SavedTierList)
        .join(TierList, TierList.id == SavedTierList.tier_list_id)
        .where(
            SavedTierList.user_id == user_id,
            or_(TierList.is_public.is_(True), TierList.user_id == user_id),
        )
        .options(selectinload(SavedTierList.tier_list).selectinload(TierList.user))
        .order_by(SavedTierList.created_at.desc())
    )
    saved_rows = result.scalars().all()
    counts = await collect_counts(db, [row.tier_list_id for row in saved_rows])

    payload = []
    for saved in saved_rows:
        card = _card(saved.tier_list, counts[saved.tier_list_id])
        card["savedAt"] = saved.created_at.isoformat() if saved.created_at else None
        payload.append(card)
    return payload
