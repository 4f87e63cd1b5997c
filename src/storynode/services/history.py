"""Bounded scrollback log."""
from __future__ import annotations

from typing import List

from storynode.domain.defs import ChoiceDef, ChoiceNodeDef, ImageNodeDef, StoryNodeDef
from storynode.domain.state import HistoryEntry, HistoryImageData

HISTORY_CAPACITY = 100
IMAGE_REMOVED_CONTENT = "[Image removed]"


class HistoryRecorder:
    """Appends entries to a history list and keeps only the most recent ones."""

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("History capacity must be positive.")
        self._capacity = capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    def record_node(self, history: List[HistoryEntry], node: StoryNodeDef, timestamp: float) -> bool:
        """Record a visible node visit. Returns False when suppressed as a duplicate."""
        if history:
            last = history[-1]
            if last.node_id == node.id and last.type == node.type:
                return False
        history.append(
            HistoryEntry(
                node_id=node.id,
                type=node.type,
                content=node.text or "",
                timestamp=timestamp,
                speaker=getattr(node, "speaker", None),
            )
        )
        self.trim(history)
        return True

    def record_choice(
        self, history: List[HistoryEntry], node: ChoiceNodeDef, choice: ChoiceDef, timestamp: float
    ) -> None:
        history.append(
            HistoryEntry(
                node_id=node.id,
                type="choice",
                content=node.text or "",
                timestamp=timestamp,
                choice_text=choice.text,
            )
        )
        self.trim(history)

    def record_image(self, history: List[HistoryEntry], node: ImageNodeDef, timestamp: float) -> None:
        directive = node.image
        if directive is None:
            return
        history.append(
            HistoryEntry(
                node_id=node.id,
                type="image",
                content=IMAGE_REMOVED_CONTENT if directive.is_removal else "",
                timestamp=timestamp,
                image=HistoryImageData(
                    resource_path=directive.resource_path,
                    layer=directive.layer,
                    is_removal=directive.is_removal,
                    effect=directive.effect,
                    effects=tuple(directive.effects),
                    effect_duration=directive.effect_duration,
                ),
            )
        )
        self.trim(history)

    def trim(self, history: List[HistoryEntry]) -> None:
        """Drop the oldest entries beyond capacity, in place."""
        overflow = len(history) - self._capacity
        if overflow > 0:
            del history[:overflow]
