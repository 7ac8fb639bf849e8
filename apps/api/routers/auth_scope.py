"""Authentication dependencies for API user scoping."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from database import get_db
from models.user import User
from services.access import Requester
from services.session_token import decode_session_token

logger = logging.getLogger(__name__)

auth_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthContext:
    user_id: str
    username: Optional[str] = None


def _decode_credentials(credentials: Optional[HTTPAuthorizationCredentials]) -> AuthContext:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing Bearer session token.")

    try:
        payload = decode_session_token(credentials.credentials)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return AuthContext(
        user_id=str(payload.get("sub", "")),
        username=str(payload.get("username", "")) or None,
    )


async def get_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
) -> AuthContext:
    """Resolve authenticated user from Bearer session token."""
    return _decode_credentials(credentials)


async def get_optional_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
) -> Optional[AuthContext]:
    """Like ``get_auth_context`` but lets anonymous callers through."""
    if not credentials:
        return None
    try:
        return _decode_credentials(credentials)
    except HTTPException:
        logger.debug("Ignoring invalid session token on optional-auth route")
        return None


async def get_current_user(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the stored user behind the session; a dangling session is unauthorized."""
    result = await db.execute(select(User).where(User.id == auth.user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=401, detail="Session user no longer exists.")
    return user


async def get_requester(
    request: Request,
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
) -> Requester:
    """Resolve the optional session and the anonymous-id header into a Requester."""
    user_id: Optional[str] = None
    if auth is not None:
        result = await db.execute(select(User.id).where(User.id == auth.user_id))
        user_id = result.scalar_one_or_none()

    anonymous_token = (request.headers.get(settings.ANONYMOUS_ID_HEADER) or "").strip() or None
    return Requester(authenticated_user_id=user_id, anonymous_token=anonymous_token)
