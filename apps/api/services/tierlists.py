"""Tier list aggregate services: create, read, full-board update, delete, list-mine, clone."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from models.comment import Comment
from models.like import Like
from models.saved_tier_list import SavedTierList
from models.tier import Tier
from models.tier_item import TierItem
from models.tier_list import TierList
from models.vote import Vote
from schemas import (
    POOL_TIER_COLOR,
    POOL_TIER_NAME,
    POOL_TIER_ORDER,
    TierListCreateRequest,
    TierListUpdateRequest,
    TierPayload,
)
from services.access import Requester, ensure_publish_allowed, resolve_access
from services.errors import ForbiddenError, InvalidInputError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_user_public(user, *, include_id: bool = True) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    payload: Dict[str, Any] = {"username": user.username, "imageUrl": user.image_url}
    if include_id:
        payload["id"] = user.id
    return payload


def serialize_item(item: TierItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "mediaUrl": item.media_url,
        "mediaType": item.media_type,
        "coverImageUrl": item.cover_image_url,
        "embedId": item.embed_id,
        "label": item.label,
        "order": item.order,
    }


def serialize_tier(tier: Tier) -> Dict[str, Any]:
    items = sorted(tier.items, key=lambda item: item.order)
    return {
        "id": tier.id,
        "name": tier.name,
        "color": tier.color,
        "order": tier.order,
        "items": [serialize_item(item) for item in items],
    }


def serialize_tier_list_summary(tier_list: TierList) -> Dict[str, Any]:
    """Top-level fields only. The anonymous token is never echoed back."""
    return {
        "id": tier_list.id,
        "title": tier_list.title,
        "description": tier_list.description,
        "coverImageUrl": tier_list.cover_image_url,
        "isPublic": bool(tier_list.is_public),
        "userId": tier_list.user_id,
        "isAnonymous": bool(tier_list.anonymous_id),
        "createdAt": _iso(tier_list.created_at),
        "updatedAt": _iso(tier_list.updated_at),
    }


def _serialize_with_tiers(tier_list: TierList) -> Dict[str, Any]:
    payload = serialize_tier_list_summary(tier_list)
    tiers = sorted(tier_list.tiers, key=lambda tier: tier.order)
    payload["tiers"] = [serialize_tier(tier) for tier in tiers]
    return payload


async def collect_counts(db: AsyncSession, tier_list_ids: Sequence[str]) -> Dict[str, Dict[str, int]]:
    """Vote/comment/like counts and vote score per tier list, in three grouped queries."""
    counts: Dict[str, Dict[str, int]] = {
        tier_list_id: {"votes": 0, "comments": 0, "likes": 0, "voteScore": 0}
        for tier_list_id in tier_list_ids
    }
    if not counts:
        return counts

    ids = list(counts.keys())
    vote_rows = await db.execute(
        select(Vote.tier_list_id, func.count(Vote.id), func.coalesce(func.sum(Vote.value), 0))
        .where(Vote.tier_list_id.in_(ids))
        .group_by(Vote.tier_list_id)
    )
    for tier_list_id, vote_count, score in vote_rows.all():
        counts[tier_list_id]["votes"] = int(vote_count or 0)
        counts[tier_list_id]["voteScore"] = int(score or 0)

    comment_rows = await db.execute(
        select(Comment.tier_list_id, func.count(Comment.id))
        .where(Comment.tier_list_id.in_(ids))
        .group_by(Comment.tier_list_id)
    )
    for tier_list_id, comment_count in comment_rows.all():
        counts[tier_list_id]["comments"] = int(comment_count or 0)

    like_rows = await db.execute(
        select(Like.tier_list_id, func.count(Like.id))
        .where(Like.tier_list_id.in_(ids))
        .group_by(Like.tier_list_id)
    )
    for tier_list_id, like_count in like_rows.all():
        counts[tier_list_id]["likes"] = int(like_count or 0)

    return counts


def _count_block(counts: Dict[str, int]) -> Dict[str, int]:
    return {"votes": counts["votes"], "comments": counts["comments"], "likes": counts["likes"]}


def build_tiers(tiers: Iterable[TierPayload]) -> List[Tier]:
    """Turn payload tiers into unsaved rows, ordered by their position in the payload.

    The pool tier keeps its sentinel order so it always sorts last.
    """
    rows: List[Tier] = []
    for index, tier_payload in enumerate(tiers):
        is_pool = tier_payload.name == POOL_TIER_NAME
        tier = Tier(
            id=str(uuid.uuid4()),
            name=tier_payload.name,
            color=tier_payload.color or (POOL_TIER_COLOR if is_pool else "#808080"),
            order=POOL_TIER_ORDER if is_pool else index,
        )
        tier.items = [
            TierItem(
                id=str(uuid.uuid4()),
                media_url=item.media_url,
                media_type=item.media_type.value,
                cover_image_url=item.cover_image_url,
                embed_id=item.embed_id,
                label=item.label or None,
                order=item_index,
            )
            for item_index, item in enumerate(tier_payload.items)
        ]
        rows.append(tier)
    return rows


async def get_tier_list_or_404(db: AsyncSession, tier_list_id: str) -> TierList:
    result = await db.execute(select(TierList).where(TierList.id == tier_list_id))
    tier_list = result.scalar_one_or_none()
    if not tier_list:
        raise NotFoundError("Tier list not found")
    return tier_list


async def _load_aggregate(db: AsyncSession, tier_list_id: str, *, with_social: bool) -> Optional[TierList]:
    options = [selectinload(TierList.tiers).selectinload(Tier.items), selectinload(TierList.user)]
    if with_social:
        options.extend(
            [
                selectinload(TierList.comments).selectinload(Comment.user),
                selectinload(TierList.votes),
                selectinload(TierList.likes),
            ]
        )
    result = await db.execute(
        select(TierList)
        .where(TierList.id == tier_list_id)
        .options(*options)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _delete_tiers(db: AsyncSession, tier_list_id: str) -> None:
    tier_ids = select(Tier.id).where(Tier.tier_list_id == tier_list_id)
    await db.execute(delete(TierItem).where(TierItem.tier_id.in_(tier_ids)))
    await db.execute(delete(Tier).where(Tier.tier_list_id == tier_list_id))


async def create_tier_list_service(
    payload: TierListCreateRequest,
    requester: Requester,
    db: AsyncSession,
) -> Dict[str, Any]:
    title = (payload.title or "").strip()
    if not title:
        raise InvalidInputError("Title and tiers are required")

    requester = requester.with_anonymous_token(payload.anonymous_id)
    user_id = requester.authenticated_user_id
    anonymous_id = None if user_id else requester.anonymous_token
    if not user_id and not anonymous_id:
        raise UnauthorizedError("Sign in or provide an anonymous id to create a tier list")

    ensure_publish_allowed(
        requested_public=payload.is_public,
        anonymous_owned=anonymous_id is not None,
        requester=requester,
    )
    is_public = payload.is_public if payload.is_public is not None else bool(user_id)

    tier_list = TierList(
        id=str(uuid.uuid4()),
        title=title,
        description=payload.description or None,
        cover_image_url=payload.cover_image_url or None,
        is_public=bool(is_public) and anonymous_id is None,
        user_id=user_id,
        anonymous_id=anonymous_id,
    )
    tier_list.tiers = build_tiers(payload.tiers)
    db.add(tier_list)
    await db.commit()
    logger.info("Created tier list %s (owner=%s)", tier_list.id, "user" if user_id else "anonymous")

    created = await _load_aggregate(db, tier_list.id, with_social=False)
    return _serialize_with_tiers(created)


async def get_tier_list_service(
    tier_list_id: str,
    requester: Requester,
    db: AsyncSession,
) -> Dict[str, Any]:
    tier_list = await _load_aggregate(db, tier_list_id, with_social=True)
    if not tier_list:
        raise NotFoundError("Tier list not found")

    resolve_access(tier_list, requester).require_read()

    payload = _serialize_with_tiers(tier_list)
    payload["user"] = serialize_user_public(tier_list.user)
    payload["comments"] = [
        {
            "id": comment.id,
            "content": comment.content,
            "createdAt": _iso(comment.created_at),
            "userId": comment.user_id,
            "user": serialize_user_public(comment.user, include_id=False),
        }
        for comment in sorted(tier_list.comments, key=lambda row: row.created_at, reverse=True)
    ]
    payload["votes"] = [
        {"id": vote.id, "userId": vote.user_id, "value": vote.value} for vote in tier_list.votes
    ]
    payload["likes"] = [{"userId": like.user_id} for like in tier_list.likes]
    payload["voteScore"] = sum(vote.value for vote in tier_list.votes)
    payload["_count"] = {
        "votes": len(tier_list.votes),
        "comments": len(tier_list.comments),
        "likes": len(tier_list.likes),
    }
    return payload


async def update_tier_list_service(
    tier_list_id: str,
    payload: TierListUpdateRequest,
    requester: Requester,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Patch top-level fields and replace every tier from the payload in one transaction."""
    tier_list = await get_tier_list_or_404(db, tier_list_id)
    requester = requester.with_anonymous_token(payload.anonymous_id)
    resolve_access(tier_list, requester).require_write()

    provided = payload.model_fields_set
    ensure_publish_allowed(
        requested_public=payload.is_public if "is_public" in provided else None,
        anonymous_owned=bool(tier_list.anonymous_id),
        requester=requester,
    )

    if payload.title is not None:
        title = payload.title.strip()
        if not title:
            raise InvalidInputError("Title cannot be empty")
        tier_list.title = title
    if "description" in provided:
        tier_list.description = payload.description
    if "cover_image_url" in provided:
        tier_list.cover_image_url = payload.cover_image_url
    if payload.is_public is not None:
        tier_list.is_public = payload.is_public
    if tier_list.anonymous_id:
        tier_list.is_public = False

    if payload.tiers is not None:
        await _delete_tiers(db, tier_list.id)
        for tier in build_tiers(payload.tiers):
            tier.tier_list_id = tier_list.id
            db.add(tier)

    await db.commit()
    logger.info("Updated tier list %s", tier_list.id)

    updated = await _load_aggregate(db, tier_list.id, with_social=False)
    return _serialize_with_tiers(updated)


async def delete_tier_list_service(
    tier_list_id: str,
    requester: Requester,
    db: AsyncSession,
) -> Dict[str, Any]:
    tier_list = await get_tier_list_or_404(db, tier_list_id)
    resolve_access(tier_list, requester).require_write()

    await _delete_tiers(db, tier_list.id)
    for model in (Vote, Like, Comment, SavedTierList):
        await db.execute(delete(model).where(model.tier_list_id == tier_list.id))
    await db.execute(delete(TierList).where(TierList.id == tier_list.id))
    await db.commit()
    logger.info("Deleted tier list %s", tier_list_id)
    return {"message": "Tier list deleted successfully"}


async def list_my_tier_lists_service(requester: Requester, db: AsyncSession) -> List[Dict[str, Any]]:
    """Lists owned by the session user, else by the anonymous token. Never both."""
    query = select(TierList).options(selectinload(TierList.tiers).selectinload(Tier.items))
    if requester.authenticated_user_id:
        query = query.where(TierList.user_id == requester.authenticated_user_id)
    elif requester.anonymous_token:
        query = query.where(TierList.anonymous_id == requester.anonymous_token)
    else:
        raise UnauthorizedError("Unauthorized")

    result = await db.execute(query.order_by(TierList.created_at.desc()))
    tier_lists = result.scalars().all()
    counts = await collect_counts(db, [row.id for row in tier_lists])

    payload: List[Dict[str, Any]] = []
    for tier_list in tier_lists:
        entry = _serialize_with_tiers(tier_list)
        entry["voteScore"] = counts[tier_list.id]["voteScore"]
        entry["_count"] = _count_block(counts[tier_list.id])
        payload.append(entry)
    return payload


async def clone_template_service(
    tier_list_id: str,
    requester: Requester,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Copy a public list's tier shells and put every item, in order, into a fresh pool."""
    source = await _load_aggregate(db, tier_list_id, with_social=False)
    if not source:
        raise NotFoundError("Tier list not found")
    if not source.is_public:
        raise ForbiddenError("Cannot use private tier list as template")

    user_id = requester.authenticated_user_id
    anonymous_id = None if user_id else f"anon-{uuid.uuid4()}"

    clone = TierList(
        id=str(uuid.uuid4()),
        title=source.title,
        description=source.description,
        cover_image_url=source.cover_image_url,
        is_public=False,
        user_id=user_id,
        anonymous_id=anonymous_id,
    )

    source_tiers = sorted(source.tiers, key=lambda tier: tier.order)
    shells: List[Tier] = [
        Tier(id=str(uuid.uuid4()), name=tier.name, color=tier.color, order=tier.order, items=[])
        for tier in source_tiers
        if tier.name != POOL_TIER_NAME
    ]

    pooled_items = [
        item for tier in source_tiers for item in sorted(tier.items, key=lambda row: row.order)
    ]
    pool = Tier(
        id=str(uuid.uuid4()),
        name=POOL_TIER_NAME,
        color=POOL_TIER_COLOR,
        order=POOL_TIER_ORDER,
    )
    pool.items = [
        TierItem(
            id=str(uuid.uuid4()),
            media_url=item.media_url,
            media_type=item.media_type,
            cover_image_url=item.cover_image_url,
            embed_id=item.embed_id,
            label=item.label,
            order=index,
        )
        for index, item in enumerate(pooled_items)
    ]
    clone.tiers = shells + [pool]

    db.add(clone)
    await db.commit()
    logger.info("Cloned template %s into %s (%d items pooled)", source.id, clone.id, len(pool.items))

    return {
        "id": clone.id,
        "anonymousId": anonymous_id,
        "message": "Template copied successfully",
    }
