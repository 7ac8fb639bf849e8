"""Public profiles and the caller's saved tier lists."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.user import User
from routers.auth_scope import get_current_user
from services.listings import get_user_profile_service, list_saved_tier_lists_service

router = APIRouter()


@router.get("/profile/{username}")
async def get_user_profile(username: str, db: AsyncSession = Depends(get_db)):
    return await get_user_profile_service(username, db)


@router.get("/saved")
async def list_saved_tier_lists(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_saved_tier_lists_service(user.id, db)
