"""
Bounded undo history for campaign actions.

Each snapshot pairs the campaign state from just before an action with
the id of the last session log entry at that moment. Undoing restores the
state and drops every log entry written after the watermark.
"""

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from hexkeeper.game_state.campaign_controller import CampaignState


DEFAULT_UNDO_DEPTH = 50


@dataclass(frozen=True)
class UndoSnapshot:
    state: "CampaignState"
    log_watermark: int  # Highest session log id when the snapshot was taken


class UndoHistory:
    """
    A capped stack of snapshots. When full, pushing drops the oldest.
    """

    def __init__(self, capacity: int = DEFAULT_UNDO_DEPTH):
        if capacity < 1:
            raise ValueError(f"Undo capacity must be at least 1, got {capacity}")
        self._snapshots: deque[UndoSnapshot] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._snapshots.maxlen

    def push(self, snapshot: UndoSnapshot) -> None:
        self._snapshots.append(snapshot)

    def pop(self) -> Optional[UndoSnapshot]:
        """Remove and return the newest snapshot, or None when empty."""
        return self._snapshots.pop() if self._snapshots else None

    def can_undo(self) -> bool:
        return bool(self._snapshots)

    def clear(self) -> None:
        self._snapshots.clear()

    def __len__(self) -> int:
        return len(self._snapshots)
