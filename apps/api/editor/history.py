"""Linear undo/redo history of board snapshots."""

from __future__ import annotations

from typing import List, Optional

from editor.models import BoardState

MAX_HISTORY_SIZE = 50


class History:
    """Bounded list of snapshots with a pointer at the current one.

    Pushing while behind the tip discards the redo branch. Once full, the
    oldest snapshot is evicted and the pointer shifts with it.
    """

    def __init__(self, initial: BoardState, max_size: int = MAX_HISTORY_SIZE):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._snapshots: List[BoardState] = [initial.copy()]
        self._pointer = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def current(self) -> BoardState:
        return self._snapshots[self._pointer].copy()

    def can_undo(self) -> bool:
        return self._pointer > 0

    def can_redo(self) -> bool:
        return self._pointer < len(self._snapshots) - 1

    def push(self, state: BoardState) -> None:
        del self._snapshots[self._pointer + 1:]
        self._snapshots.append(state.copy())
        overflow = len(self._snapshots) - self.max_size
        if overflow > 0:
            del self._snapshots[:overflow]
        self._pointer = len(self._snapshots) - 1

    def undo(self) -> Optional[BoardState]:
        if not self.can_undo():
            return None
        self._pointer -= 1
        return self.current

    def redo(self) -> Optional[BoardState]:
        if not self.can_redo():
            return None
        self._pointer += 1
        return self.current
