"""Editor board state: items, tiers and the snapshot the history stores."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from schemas import MediaType

POOL_CONTAINER_ID = "unplaced"


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class BoardItem:
    id: str
    media_url: str
    media_type: MediaType = MediaType.IMAGE
    cover_image_url: Optional[str] = None
    embed_id: Optional[str] = None
    label: Optional[str] = None

    @classmethod
    def create(cls, media_url: str, media_type: MediaType = MediaType.IMAGE, **extra: Any) -> "BoardItem":
        return cls(id=new_id("item"), media_url=media_url, media_type=MediaType(media_type), **extra)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "mediaUrl": self.media_url,
            "mediaType": self.media_type.value,
            "coverImageUrl": self.cover_image_url,
            "embedId": self.embed_id,
            "label": self.label,
        }


@dataclass
class BoardTier:
    id: str
    name: str
    color: str
    items: List[BoardItem] = field(default_factory=list)

    def copy(self) -> "BoardTier":
        return replace(self, items=list(self.items))


@dataclass
class BoardState:
    """Working state of one board. Copies share immutable items only."""

    tiers: List[BoardTier] = field(default_factory=list)
    unplaced_items: List[BoardItem] = field(default_factory=list)

    def copy(self) -> "BoardState":
        return BoardState(
            tiers=[tier.copy() for tier in self.tiers],
            unplaced_items=list(self.unplaced_items),
        )
