"""
Wire-format schemas shared by the API routers, the tier list services and the editor.

Request bodies use camelCase field names (``isPublic``, ``coverImageUrl``,
``anonymousId``); snake_case names are accepted too.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

POOL_TIER_NAME = "__POOL__"
POOL_TIER_ORDER = 9999
POOL_TIER_COLOR = "#808080"


class MediaType(str, Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    AUDIO = "AUDIO"
    GIF = "GIF"
    # Embeds, identified by ``embed_id``
    YOUTUBE = "YOUTUBE"
    TWITTER = "TWITTER"
    INSTAGRAM = "INSTAGRAM"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TierItemPayload(WireModel):
    media_url: str = Field(min_length=1)
    media_type: MediaType = MediaType.IMAGE
    cover_image_url: Optional[str] = None
    embed_id: Optional[str] = None
    label: Optional[str] = None


class TierPayload(WireModel):
    name: str
    color: str = "#808080"
    items: List[TierItemPayload] = Field(default_factory=list)


class TierListCreateRequest(WireModel):
    title: str
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    is_public: Optional[bool] = None
    tiers: List[TierPayload]
    anonymous_id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value


class TierListUpdateRequest(WireModel):
    """Full-board update. Omitted top-level fields keep their stored values."""

    title: Optional[str] = None
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    is_public: Optional[bool] = None
    tiers: Optional[List[TierPayload]] = None
    anonymous_id: Optional[str] = None


class VoteRequest(WireModel):
    value: StrictInt
    anonymous_id: Optional[str] = None


class CommentRequest(WireModel):
    content: str = Field(max_length=2000)


class EmbedRequest(WireModel):
    url: str = Field(min_length=1, max_length=2000)


class ClientUploadRequest(WireModel):
    pathname: str = Field(min_length=1, max_length=512)
    content_type: str
    size: Optional[int] = Field(default=None, ge=0)


class SignupRequest(WireModel):
    username: str
    email: str
    password: str


class SigninRequest(WireModel):
    login: str = Field(min_length=1, description="Username or email")
    password: str
