"""Tier list CRUD, discovery, voting and social endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from models.user import User
from routers.auth_scope import AuthContext, get_current_user, get_optional_auth_context, get_requester
from routers.rate_limit import rate_limit
from schemas import CommentRequest, TierListCreateRequest, TierListUpdateRequest, VoteRequest
from services.access import Requester
from services.listings import list_public_tier_lists_service, list_top_tier_lists_service
from services.social import (
    add_comment_service,
    get_save_status_service,
    like_tier_list_service,
    save_tier_list_service,
    unlike_tier_list_service,
    unsave_tier_list_service,
)
from services.tierlists import (
    clone_template_service,
    create_tier_list_service,
    delete_tier_list_service,
    get_tier_list_service,
    list_my_tier_lists_service,
    update_tier_list_service,
)
from services.votes import cast_vote_service, get_vote_status_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def list_my_tier_lists(
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    """Lists owned by the session user, or by the anonymous id header."""
    return await list_my_tier_lists_service(requester, db)


@router.post("", status_code=201)
async def create_tier_list(
    request: TierListCreateRequest,
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await create_tier_list_service(request, requester, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to create tier list")
        raise HTTPException(status_code=500, detail="Failed to create tier list.")


# Fixed paths are registered before /{tier_list_id}.
@router.get("/public")
async def list_public_tier_lists(
    response: Response,
    limit: int = Query(default=0, ge=0),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    payload = await list_public_tier_lists_service(db, limit=limit, offset=offset)
    response.headers["Cache-Control"] = f"public, s-maxage={int(settings.PUBLIC_LIST_CACHE_SECONDS)}"
    return payload


@router.get("/top")
async def list_top_tier_lists(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await list_top_tier_lists_service(db, limit=limit or settings.TOP_LIST_DEFAULT_LIMIT)


@router.get("/{tier_list_id}")
async def get_tier_list(
    tier_list_id: str,
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    return await get_tier_list_service(tier_list_id, requester, db)


@router.put("/{tier_list_id}")
async def update_tier_list(
    tier_list_id: str,
    request: TierListUpdateRequest,
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await update_tier_list_service(tier_list_id, request, requester, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to update tier list %s", tier_list_id)
        raise HTTPException(status_code=500, detail="Failed to update tier list.")


@router.delete("/{tier_list_id}")
async def delete_tier_list(
    tier_list_id: str,
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    return await delete_tier_list_service(tier_list_id, requester, db)


@router.post("/{tier_list_id}/use-template", status_code=201)
async def use_tier_list_as_template(
    tier_list_id: str,
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await clone_template_service(tier_list_id, requester, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to clone template %s", tier_list_id)
        raise HTTPException(status_code=500, detail="Failed to use template.")


@router.post("/{tier_list_id}/vote")
async def vote_on_tier_list(
    tier_list_id: str,
    request: VoteRequest,
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    return await cast_vote_service(
        tier_list_id,
        request.value,
        requester.with_anonymous_token(request.anonymous_id),
        db,
    )


@router.get("/{tier_list_id}/vote")
async def get_vote_status(
    tier_list_id: str,
    anonymous_id: Optional[str] = Query(default=None, alias="anonymousId"),
    requester: Requester = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    return await get_vote_status_service(tier_list_id, requester.with_anonymous_token(anonymous_id), db)


@router.post("/{tier_list_id}/like")
async def like_tier_list(
    tier_list_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await like_tier_list_service(user.id, tier_list_id, db)


@router.delete("/{tier_list_id}/like")
async def unlike_tier_list(
    tier_list_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await unlike_tier_list_service(user.id, tier_list_id, db)


@router.get("/{tier_list_id}/save")
async def get_save_status(
    tier_list_id: str,
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    if auth is None:
        return {"isSaved": False}
    return await get_save_status_service(auth.user_id, tier_list_id, db)


@router.post("/{tier_list_id}/save")
async def save_tier_list(
    tier_list_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await save_tier_list_service(user.id, tier_list_id, db)


@router.delete("/{tier_list_id}/save")
async def unsave_tier_list(
    tier_list_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await unsave_tier_list_service(user.id, tier_list_id, db)


@router.post("/{tier_list_id}/comments", status_code=201)
async def add_comment(
    tier_list_id: str,
    request: CommentRequest,
    _rate_limit: None = Depends(rate_limit("comments")),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await add_comment_service(user, tier_list_id, request.content, db)
