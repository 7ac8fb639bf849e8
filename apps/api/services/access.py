"""Ownership and visibility rules for tier lists."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Type

from fastapi import HTTPException

from services.errors import ForbiddenError, UnauthorizedError


@dataclass(frozen=True)
class Requester:
    """Who is asking.

    ``authenticated_user_id`` is only set once the session resolved to a stored
    user. ``anonymous_token`` is a client-generated capability token: holding it
    is the only proof of ownership for anonymous lists.
    """

    authenticated_user_id: Optional[str] = None
    anonymous_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.authenticated_user_id)

    def with_anonymous_token(self, token: Optional[str]) -> "Requester":
        """Prefer a body-supplied token over the header one."""
        cleaned = (token or "").strip()
        if not cleaned:
            return self
        return replace(self, anonymous_token=cleaned)


@dataclass(frozen=True)
class AccessDecision:
    can_read: bool
    can_write: bool
    denial: Optional[Type[HTTPException]] = None
    denial_detail: str = ""

    def require_read(self) -> None:
        if not self.can_read:
            raise self._denial()

    def require_write(self) -> None:
        if not self.can_write:
            raise self._denial()

    def _denial(self) -> HTTPException:
        error_cls = self.denial or ForbiddenError
        return error_cls(self.denial_detail or "Forbidden")


def resolve_access(tier_list, requester: Requester) -> AccessDecision:
    """Decide read/write permission of ``requester`` on ``tier_list``.

    Public lists are always readable. Anonymous lists require the matching
    token, user lists the matching session. Lists with neither owner are
    readable by everyone and writable by no one.
    """
    is_public = bool(tier_list.is_public)

    if tier_list.anonymous_id:
        token = (requester.anonymous_token or "").strip()
        if token and token == tier_list.anonymous_id:
            return AccessDecision(can_read=True, can_write=True)
        return AccessDecision(
            can_read=is_public,
            can_write=False,
            denial=ForbiddenError,
            denial_detail="Forbidden",
        )

    if tier_list.user_id:
        if not requester.authenticated_user_id:
            return AccessDecision(
                can_read=is_public,
                can_write=False,
                denial=UnauthorizedError,
                denial_detail="Unauthorized",
            )
        if requester.authenticated_user_id != tier_list.user_id:
            return AccessDecision(
                can_read=is_public,
                can_write=False,
                denial=ForbiddenError,
                denial_detail="Forbidden",
            )
        return AccessDecision(can_read=True, can_write=True)

    return AccessDecision(
        can_read=True,
        can_write=False,
        denial=ForbiddenError,
        denial_detail="Tier list has no owner",
    )


def ensure_publish_allowed(*, requested_public: Optional[bool], anonymous_owned: bool, requester: Requester) -> None:
    """Reject attempts to publish without an authenticated owner."""
    if not requested_public:
        return
    if anonymous_owned or not requester.is_authenticated:
        raise UnauthorizedError("Authentication required to publish publicly")
