"""Up/down voting on tier lists by users or anonymous tokens."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.vote import Vote
from services.access import Requester, resolve_access
from services.errors import AlreadyExistsError, InvalidInputError
from services.tierlists import get_tier_list_or_404

logger = logging.getLogger(__name__)

ALLOWED_VOTE_VALUES = (1, -1)


def _identity_filter(requester: Requester):
    if requester.authenticated_user_id:
        return Vote.user_id == requester.authenticated_user_id
    return Vote.anonymous_id == requester.anonymous_token


async def cast_vote_service(
    tier_list_id: str,
    value: Any,
    requester: Requester,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Create, flip, or (same value twice) remove the caller's vote."""
    if isinstance(value, bool) or value not in ALLOWED_VOTE_VALUES:
        raise InvalidInputError("Invalid vote value. Must be 1 (upvote) or -1 (downvote)")
    value = int(value)

    tier_list = await get_tier_list_or_404(db, tier_list_id)

    if not requester.authenticated_user_id and not requester.anonymous_token:
        raise InvalidInputError("Anonymous id required")
    resolve_access(tier_list, requester).require_read()

    result = await db.execute(
        select(Vote).where(Vote.tier_list_id == tier_list_id, _identity_filter(requester))
    )
    existing = result.scalar_one_or_none()

    if existing:
        if existing.value == value:
            await db.delete(existing)
            await db.commit()
            return {"message": "Vote removed", "userVote": None}
        existing.value = value
        await db.commit()
        return {"message": "Vote updated", "userVote": value}

    vote = Vote(
        tier_list_id=tier_list_id,
        user_id=requester.authenticated_user_id,
        anonymous_id=None if requester.authenticated_user_id else requester.anonymous_token,
        value=value,
    )
    db.add(vote)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Duplicate vote insert on tier list %s", tier_list_id)
        raise AlreadyExistsError("Vote already recorded") from exc
    return {"message": "Vote recorded", "userVote": value}


async def get_vote_status_service(
    tier_list_id: str,
    requester: Requester,
    db: AsyncSession,
) -> Dict[str, Any]:
    result = await db.execute(select(Vote.value).where(Vote.tier_list_id == tier_list_id))
    values = [int(row) for row in result.scalars().all()]

    user_vote: Optional[int] = None
    if requester.authenticated_user_id or requester.anonymous_token:
        own = await db.execute(
            select(Vote.value).where(Vote.tier_list_id == tier_list_id, _identity_filter(requester))
        )
        user_vote = own.scalar_one_or_none()

    return {
        "score": sum(values),
        "upvotes": sum(1 for v in values if v == 1),
        "downvotes": sum(1 for v in values if v == -1),
        "userVote": user_vote,
    }
