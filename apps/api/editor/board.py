"""Tier list editor: drag-and-drop moves, tier management and undo/redo.

Every item lives in exactly one container, either a tier or the unplaced pool.
Moves remove from the source and insert into the destination; nothing is
copied and nothing is dropped. Each change that alters the board is pushed to
the history; undo/redo replays never are.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from editor.history import MAX_HISTORY_SIZE, History
from editor.models import POOL_CONTAINER_ID, BoardItem, BoardState, BoardTier, new_id
from editor.templates import NEW_TIER_COLOR, NEW_TIER_NAME, default_tiers, template_tiers
from schemas import POOL_TIER_COLOR, POOL_TIER_NAME, MediaType

logger = logging.getLogger(__name__)


class TierListEditor:
    def __init__(
        self,
        tiers: Optional[List[BoardTier]] = None,
        unplaced_items: Optional[List[BoardItem]] = None,
        max_history: int = MAX_HISTORY_SIZE,
    ):
        self._state = BoardState(
            tiers=[tier.copy() for tier in tiers] if tiers is not None else default_tiers(),
            unplaced_items=list(unplaced_items or []),
        )
        self.history = History(self._state, max_size=max_history)

    # -- read side ---------------------------------------------------------

    @property
    def state(self) -> BoardState:
        return self._state.copy()

    @property
    def tiers(self) -> List[BoardTier]:
        return self.state.tiers

    @property
    def unplaced_items(self) -> List[BoardItem]:
        return list(self._state.unplaced_items)

    def tier(self, tier_id: str) -> BoardTier:
        for tier in self._state.tiers:
            if tier.id == tier_id:
                return tier.copy()
        raise KeyError(tier_id)

    def find_container(self, target_id: str) -> Optional[str]:
        """Resolve a drop id (tier, pool or item) to its container id."""
        if target_id == POOL_CONTAINER_ID:
            return POOL_CONTAINER_ID
        for tier in self._state.tiers:
            if tier.id == target_id:
                return tier.id
        for tier in self._state.tiers:
            if any(item.id == target_id for item in tier.items):
                return tier.id
        if any(item.id == target_id for item in self._state.unplaced_items):
            return POOL_CONTAINER_ID
        return None

    # -- history -----------------------------------------------------------

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self._state = snapshot
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self._state = snapshot
        return True

    def _commit(self, draft: BoardState) -> bool:
        if draft == self._state:
            return False
        self._state = draft
        self.history.push(draft)
        return True

    # -- items -------------------------------------------------------------

    @staticmethod
    def _items_of(state: BoardState, container_id: str) -> List[BoardItem]:
        if container_id == POOL_CONTAINER_ID:
            return state.unplaced_items
        for tier in state.tiers:
            if tier.id == container_id:
                return tier.items
        raise KeyError(container_id)

    def move_item(self, item_id: str, over_id: str) -> bool:
        """Drop ``item_id`` onto ``over_id`` (an item, a tier or the pool)."""
        source_id = self.find_container(item_id)
        dest_id = self.find_container(over_id)
        # A container id resolves to itself, so only real items can be dragged.
        if source_id in (None, item_id) or dest_id is None or item_id == over_id:
            return False

        draft = self._state.copy()
        source = self._items_of(draft, source_id)
        dest = self._items_of(draft, dest_id)
        old_index = next(i for i, item in enumerate(source) if item.id == item_id)
        over_index = next((i for i, item in enumerate(dest) if item.id == over_id), None)

        # Within one container this is a plain array move: the dragged item
        # takes the target item's index. Dropping on a container appends.
        moving = source.pop(old_index)
        dest.insert(over_index if over_index is not None else len(dest), moving)
        return self._commit(draft)

    def add_items(self, items: Iterable[BoardItem]) -> bool:
        draft = self._state.copy()
        draft.unplaced_items.extend(items)
        return self._commit(draft)

    def add_item(self, media_url: str, media_type: MediaType = MediaType.IMAGE, **extra: Any) -> BoardItem:
        item = BoardItem.create(media_url, media_type, **extra)
        self.add_items([item])
        return item

    def remove_item(self, item_id: str) -> bool:
        container_id = self.find_container(item_id)
        if container_id is None or container_id == item_id:
            return False
        draft = self._state.copy()
        items = self._items_of(draft, container_id)
        items[:] = [item for item in items if item.id != item_id]
        return self._commit(draft)

    # -- tiers -------------------------------------------------------------

    def _tier_index(self, state: BoardState, tier_id: str) -> int:
        for index, tier in enumerate(state.tiers):
            if tier.id == tier_id:
                return index
        raise KeyError(tier_id)

    def add_tier(self, name: str = NEW_TIER_NAME, color: str = NEW_TIER_COLOR) -> BoardTier:
        tier = BoardTier(id=new_id("tier"), name=name, color=color)
        draft = self._state.copy()
        draft.tiers.append(tier)
        self._commit(draft)
        return tier.copy()

    def insert_tier_after(self, tier_id: str, name: str = NEW_TIER_NAME, color: str = NEW_TIER_COLOR) -> BoardTier:
        draft = self._state.copy()
        index = self._tier_index(draft, tier_id)
        tier = BoardTier(id=new_id("tier"), name=name, color=color)
        draft.tiers.insert(index + 1, tier)
        self._commit(draft)
        return tier.copy()

    def remove_tier(self, tier_id: str) -> bool:
        """Delete a tier; its items go back to the pool."""
        draft = self._state.copy()
        index = self._tier_index(draft, tier_id)
        removed = draft.tiers.pop(index)
        draft.unplaced_items.extend(removed.items)
        return self._commit(draft)

    def rename_tier(self, tier_id: str, name: str) -> bool:
        draft = self._state.copy()
        draft.tiers[self._tier_index(draft, tier_id)].name = name
        return self._commit(draft)

    def recolor_tier(self, tier_id: str, color: str) -> bool:
        draft = self._state.copy()
        draft.tiers[self._tier_index(draft, tier_id)].color = color
        return self._commit(draft)

    def _swap_tier(self, tier_id: str, offset: int) -> bool:
        draft = self._state.copy()
        index = self._tier_index(draft, tier_id)
        target = index + offset
        if target < 0 or target >= len(draft.tiers):
            return False
        draft.tiers[index], draft.tiers[target] = draft.tiers[target], draft.tiers[index]
        return self._commit(draft)

    def move_tier_up(self, tier_id: str) -> bool:
        return self._swap_tier(tier_id, -1)

    def move_tier_down(self, tier_id: str) -> bool:
        return self._swap_tier(tier_id, 1)

    def apply_template(self, template_name: str) -> bool:
        """Swap in a template's empty tiers; ranked items return to the pool."""
        shells = template_tiers(template_name)
        draft = self._state.copy()
        for tier in draft.tiers:
            draft.unplaced_items.extend(tier.items)
        draft.tiers = shells
        return self._commit(draft)

    # -- persistence boundary ----------------------------------------------

    def to_tiers_payload(self) -> List[Dict[str, Any]]:
        payload = [
            {
                "name": tier.name,
                "color": tier.color,
                "items": [item.to_payload() for item in tier.items],
            }
            for tier in self._state.tiers
        ]
        if self._state.unplaced_items:
            payload.append(
                {
                    "name": POOL_TIER_NAME,
                    "color": POOL_TIER_COLOR,
                    "items": [item.to_payload() for item in self._state.unplaced_items],
                }
            )
        return payload

    def to_request(
        self,
        title: str,
        *,
        description: Optional[str] = None,
        cover_image_url: Optional[str] = None,
        is_public: Optional[bool] = None,
        anonymous_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Body for ``POST /tierlists`` or ``PUT /tierlists/{id}``."""
        body: Dict[str, Any] = {
            "title": title,
            "description": description,
            "coverImageUrl": cover_image_url,
            "tiers": self.to_tiers_payload(),
        }
        if is_public is not None:
            body["isPublic"] = is_public
        if anonymous_id:
            body["anonymousId"] = anonymous_id
        return body

    @classmethod
    def from_tier_list(cls, tier_list: Mapping[str, Any], max_history: int = MAX_HISTORY_SIZE) -> "TierListEditor":
        """Load a serialized tier list, splitting the pool tier back out."""
        tiers: List[BoardTier] = []
        unplaced: List[BoardItem] = []
        for tier in tier_list.get("tiers") or []:
            items = [
                BoardItem(
                    id=str(item.get("id") or new_id("item")),
                    media_url=item["mediaUrl"],
                    media_type=MediaType(item.get("mediaType") or MediaType.IMAGE),
                    cover_image_url=item.get("coverImageUrl"),
                    embed_id=item.get("embedId"),
                    label=item.get("label"),
                )
                for item in tier.get("items") or []
            ]
            if tier.get("name") == POOL_TIER_NAME:
                unplaced.extend(items)
                continue
            tiers.append(
                BoardTier(
                    id=str(tier.get("id") or new_id("tier")),
                    name=tier["name"],
                    color=tier.get("color") or NEW_TIER_COLOR,
                    items=items,
                )
            )
        logger.debug("Loaded board with %d tiers and %d unplaced items", len(tiers), len(unplaced))
        return cls(tiers=tiers, unplaced_items=unplaced, max_history=max_history)
