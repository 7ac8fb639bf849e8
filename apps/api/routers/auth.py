"""
Authentication router: username/password accounts and session tokens.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import get_db
from models.user import User
from routers.auth_scope import AuthContext, get_auth_context, get_optional_auth_context
from routers.rate_limit import rate_limit
from schemas import SigninRequest, SignupRequest
from services.users import serialize_account, signin_service, signup_service

router = APIRouter()


@router.post("/signup", status_code=201)
async def signup(
    request: SignupRequest,
    _rate_limit: None = Depends(rate_limit("auth_signup")),
    db: AsyncSession = Depends(get_db),
):
    return await signup_service(request.username, request.email, request.password, db)


@router.post("/signin")
async def signin(
    request: SigninRequest,
    _rate_limit: None = Depends(rate_limit("auth_signin")),
    db: AsyncSession = Depends(get_db),
):
    return await signin_service(request.login, request.password, db)


@router.post("/signout")
async def signout(auth: AuthContext = Depends(get_auth_context)):
    """Session tokens are stateless; the client drops its copy."""
    return {"message": "Signed out", "userId": auth.user_id}


@router.get("/me")
async def get_current_account(
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    if auth is None:
        return {"user": None}
    result = await db.execute(select(User).where(User.id == auth.user_id))
    user = result.scalar_one_or_none()
    return {"user": serialize_account(user) if user else None}
