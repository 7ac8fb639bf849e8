"""Username/password accounts."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.user import User
from services.errors import AlreadyExistsError, InvalidInputError, UnauthorizedError
from services.passwords import hash_password, verify_password
from services.session_token import create_session_token

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_signup(username: str, email: str, password: str) -> None:
    if not username or not email or not password:
        raise InvalidInputError("Username, email, and password are required")
    if len(username) < 3 or len(username) > 31:
        raise InvalidInputError("Username must be between 3 and 31 characters")
    if not USERNAME_PATTERN.match(username):
        raise InvalidInputError("Username can only contain letters, numbers, underscores, and hyphens")
    if not EMAIL_PATTERN.match(email):
        raise InvalidInputError("Email address is invalid")
    if len(password) < 6 or len(password) > 255:
        raise InvalidInputError("Password must be between 6 and 255 characters")


def serialize_account(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "imageUrl": user.image_url,
    }


def _session_payload(user: User) -> Dict[str, Any]:
    session = create_session_token(user.id, user.username)
    return {
        "user": serialize_account(user),
        "sessionToken": session["token"],
        "sessionExpiresAt": session["expires_at"],
    }


async def signup_service(username: str, email: str, password: str, db: AsyncSession) -> Dict[str, Any]:
    username = (username or "").strip()
    email = (email or "").strip().lower()
    validate_signup(username, email, password or "")

    existing = await db.execute(
        select(User.id).where(or_(User.username == username, User.email == email))
    )
    if existing.first():
        raise AlreadyExistsError("Username or email already taken")

    user = User(username=username, email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Duplicate signup for %s lost the insert race", username)
        raise AlreadyExistsError("Username or email already taken") from exc
    logger.info("Created account %s", user.id)
    return _session_payload(user)


async def signin_service(login: str, password: str, db: AsyncSession) -> Dict[str, Any]:
    login = (login or "").strip()
    result = await db.execute(
        select(User).where(or_(User.username == login, User.email == login.lower()))
    )
    user = result.scalar_one_or_none()
    if not user or not verify_password(password or "", user.password_hash or ""):
        raise UnauthorizedError("Invalid username or password")
    return _session_payload(user)
