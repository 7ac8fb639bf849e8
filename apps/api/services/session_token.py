"""Signed, typed JWTs: browser sessions and direct-upload tickets share one signer."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from jose import JWTError, jwt

from config import settings


SESSION_TOKEN_TYPE = "rankmaker_session"


def issue_token(token_type: str, claims: Dict[str, Any], ttl: timedelta) -> Tuple[str, datetime]:
    """Sign ``claims`` tagged with ``token_type``; returns the token and its expiry."""
    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + max(ttl, timedelta(minutes=1))
    body = dict(claims)
    body.update(
        type=token_type,
        iat=int(issued_at.timestamp()),
        exp=int(expires_at.timestamp()),
    )
    return jwt.encode(body, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM), expires_at


def read_token(token: str, token_type: str) -> Dict[str, Any]:
    """Verify signature, expiry and type. Raises ValueError on any mismatch."""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid or expired token.") from exc
    if str(claims.get("type", "")).strip() != token_type:
        raise ValueError("Unexpected token type.")
    return claims


def create_session_token(
    user_id: str,
    username: Optional[str] = None,
    expires_hours: Optional[int] = None,
) -> Dict[str, Any]:
    hours = int(expires_hours or settings.JWT_EXPIRATION_HOURS or 24)
    claims: Dict[str, Any] = {"sub": user_id}
    if username:
        claims["username"] = username
    token, expires_at = issue_token(SESSION_TOKEN_TYPE, claims, timedelta(hours=hours))
    return {"token": token, "expires_at": int(expires_at.timestamp())}


def decode_session_token(token: str) -> Dict[str, Any]:
    claims = read_token(token, SESSION_TOKEN_TYPE)
    if not str(claims.get("sub", "")).strip():
        raise ValueError("Session token missing subject.")
    return claims
