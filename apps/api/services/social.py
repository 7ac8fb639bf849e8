"""Likes, saved-list bookmarks and comments. All require an authenticated user."""

from __future__ import annotations

import logging
from typing import Any, Dict, Type

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.comment import Comment
from models.like import Like
from models.saved_tier_list import SavedTierList
from models.user import User
from services.access import Requester, resolve_access
from services.errors import AlreadyExistsError, InvalidInputError, NotFoundError
from services.tierlists import get_tier_list_or_404, serialize_user_public

logger = logging.getLogger(__name__)


async def _add_pair(model: Type, *, user_id: str, tier_list_id: str, db: AsyncSession, label: str) -> None:
    tier_list = await get_tier_list_or_404(db, tier_list_id)
    resolve_access(tier_list, Requester(authenticated_user_id=user_id)).require_read()

    existing = await db.execute(
        select(model.id).where(model.user_id == user_id, model.tier_list_id == tier_list_id)
    )
    if existing.scalar_one_or_none():
        raise AlreadyExistsError(f"Already {label}")

    db.add(model(user_id=user_id, tier_list_id=tier_list_id))
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise AlreadyExistsError(f"Already {label}") from exc


async def _remove_pair(model: Type, *, user_id: str, tier_list_id: str, db: AsyncSession, label: str) -> None:
    result = await db.execute(
        delete(model).where(model.user_id == user_id, model.tier_list_id == tier_list_id)
    )
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError(f"Not {label}")
    await db.commit()


async def like_tier_list_service(user_id: str, tier_list_id: str, db: AsyncSession) -> Dict[str, Any]:
    await _add_pair(Like, user_id=user_id, tier_list_id=tier_list_id, db=db, label="liked")
    return {"message": "Liked successfully"}


async def unlike_tier_list_service(user_id: str, tier_list_id: str, db: AsyncSession) -> Dict[str, Any]:
    await _remove_pair(Like, user_id=user_id, tier_list_id=tier_list_id, db=db, label="liked")
    return {"message": "Unliked successfully"}


async def save_tier_list_service(user_id: str, tier_list_id: str, db: AsyncSession) -> Dict[str, Any]:
    await _add_pair(SavedTierList, user_id=user_id, tier_list_id=tier_list_id, db=db, label="saved")
    return {"message": "Saved successfully"}


async def unsave_tier_list_service(user_id: str, tier_list_id: str, db: AsyncSession) -> Dict[str, Any]:
    await _remove_pair(SavedTierList, user_id=user_id, tier_list_id=tier_list_id, db=db, label="saved")
    return {"message": "Unsaved successfully"}


async def get_save_status_service(user_id: str, tier_list_id: str, db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(SavedTierList.id).where(
            SavedTierList.user_id == user_id,
            SavedTierList.tier_list_id == tier_list_id,
        )
    )
    return {"isSaved": result.scalar_one_or_none() is not None}


async def add_comment_service(user: User, tier_list_id: str, content: str, db: AsyncSession) -> Dict[str, Any]:
    text = (content or "").strip()
    if not text:
        raise InvalidInputError("Content is required")

    tier_list = await get_tier_list_or_404(db, tier_list_id)
    resolve_access(tier_list, Requester(authenticated_user_id=user.id)).require_read()

    comment = Comment(user_id=user.id, tier_list_id=tier_list_id, content=text)
    db.add(comment)
    await db.commit()
    logger.info("User %s commented on tier list %s", user.id, tier_list_id)

    return {
        "id": comment.id,
        "content": comment.content,
        "createdAt": comment.created_at.isoformat() if comment.created_at else None,
        "tierListId": tier_list_id,
        "userId": user.id,
        "user": serialize_user_public(user, include_id=False),
    }
