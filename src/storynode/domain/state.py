"""Domain-level state tracking."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from storynode.core.types import Alignment, ImageLayer, Scalar

DEFAULT_GOLD = 0
DEFAULT_HP = 100


@dataclass(slots=True)
class GameVariables:
    """Persistent variable set mutated by effects and variable nodes."""

    gold: int = DEFAULT_GOLD
    hp: int = DEFAULT_HP
    flags: Dict[str, Scalar] = field(default_factory=dict)
    affection: Dict[str, int] = field(default_factory=dict)
    reputation: Dict[str, int] = field(default_factory=dict)
    choices_made: List[str] = field(default_factory=list)

    def copy(self) -> GameVariables:
        return GameVariables(
            gold=self.gold,
            hp=self.hp,
            flags=dict(self.flags),
            affection=dict(self.affection),
            reputation=dict(self.reputation),
            choices_made=list(self.choices_made),
        )


@dataclass(slots=True)
class HistoryImageData:
    resource_path: str
    layer: ImageLayer
    is_removal: bool
    effect: str | None = None
    effects: Tuple[str, ...] = ()
    effect_duration: int = 0


@dataclass(slots=True)
class HistoryEntry:
    """Single scrollback line."""

    node_id: str
    type: str
    content: str
    timestamp: float
    speaker: str | None = None
    choice_text: str | None = None
    image: HistoryImageData | None = None


@dataclass(slots=True)
class ActiveImage:
    """Image currently on screen, occupying one (layer, layer_order) slot."""

    id: str
    instance_id: int
    resource_path: str
    layer: ImageLayer
    layer_order: int = 0
    alignment: Alignment = "center"
    x: float | None = None
    y: float | None = None
    flip_horizontal: bool = False
    object_fit: str | None = None
    effect: str | None = None
    effects: Tuple[str, ...] = ()
    effect_duration: int = 0

    @property
    def slot(self) -> Tuple[str, int]:
        return (self.layer, self.layer_order)


@dataclass(slots=True)
class GameState:
    """Everything that is saved and restored for a playthrough."""

    current_node_id: str = ""
    current_stage_id: str = ""
    current_chapter_id: str = ""
    variables: GameVariables = field(default_factory=GameVariables)
    history: List[HistoryEntry] = field(default_factory=list)
    active_images: List[ActiveImage] = field(default_factory=list)
    started_at: float = 0.0
    play_time: float = 0.0

    def snapshot(self) -> GameState:
        """Return a detached deep copy safe to hand to listeners."""
        return copy.deepcopy(self)
