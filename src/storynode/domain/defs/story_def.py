"""Story document structures consumed by the runtime."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Tuple, Union

from storynode.core.types import Alignment, ConditionKind, ImageLayer, Scalar, VariableAction, VariableTarget


@dataclass(frozen=True, slots=True)
class NumericCondition:
    """Gold/hp check against an exact value or an inclusive range."""

    kind: ConditionKind
    value: float | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True, slots=True)
class FlagCondition:
    kind: ClassVar[str] = "flag"

    flag_key: str | None = None
    flag_value: Scalar | None = None


@dataclass(frozen=True, slots=True)
class ChoiceMadeCondition:
    kind: ClassVar[str] = "choice_made"

    choice_id: str | None = None


@dataclass(frozen=True, slots=True)
class AffectionCondition:
    kind: ClassVar[str] = "affection"

    character_id: str | None = None
    value: float | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True, slots=True)
class ReputationCondition:
    kind: ClassVar[str] = "reputation"

    faction_id: str | None = None
    value: float | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True, slots=True)
class UnknownCondition:
    """Condition whose kind the runtime does not understand; always passes."""

    kind: str


ConditionDef = Union[
    NumericCondition,
    FlagCondition,
    ChoiceMadeCondition,
    AffectionCondition,
    ReputationCondition,
    UnknownCondition,
]


@dataclass(frozen=True, slots=True)
class AffectionChange:
    character_id: str
    delta: int


@dataclass(frozen=True, slots=True)
class ReputationChange:
    faction_id: str
    delta: int


@dataclass(frozen=True, slots=True)
class EffectBundleDef:
    """Deltas and assignments applied to game variables."""

    gold: int | None = None
    hp: int | None = None
    set_flags: Dict[str, Scalar] = field(default_factory=dict)
    affection: Tuple[AffectionChange, ...] = ()
    reputation: Tuple[ReputationChange, ...] = ()


@dataclass(frozen=True, slots=True)
class VariableOperationDef:
    target: VariableTarget
    action: VariableAction
    value: Scalar = 0
    key: str | None = None
    character_id: str | None = None
    faction_id: str | None = None


@dataclass(frozen=True, slots=True)
class ImageDirectiveDef:
    """Image placement; an empty resource path clears the (layer, layer_order) slot."""

    resource_path: str = ""
    layer: ImageLayer = "background"
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
    def is_removal(self) -> bool:
        return not self.resource_path

    @property
    def has_effect(self) -> bool:
        return bool(self.effects) or (self.effect is not None and self.effect != "none")


@dataclass(frozen=True, slots=True)
class ChoiceDef:
    """Selectable option on a choice node."""

    id: str
    text: str
    next_node_id: str | None = None
    condition: ConditionDef | None = None
    effects: EffectBundleDef | None = None


@dataclass(frozen=True, slots=True)
class ConditionBranchDef:
    condition: ConditionDef
    next_node_id: str | None = None
    id: str | None = None


@dataclass(frozen=True, slots=True)
class StartNodeDef:
    type: ClassVar[str] = "start"

    id: str
    text: str = ""
    next_node_id: str | None = None
    on_enter_effects: EffectBundleDef | None = None


@dataclass(frozen=True, slots=True)
class DialogueNodeDef:
    type: ClassVar[str] = "dialogue"

    id: str
    text: str = ""
    next_node_id: str | None = None
    on_enter_effects: EffectBundleDef | None = None
    speaker: str | None = None


@dataclass(frozen=True, slots=True)
class ChoiceNodeDef:
    type: ClassVar[str] = "choice"

    id: str
    text: str = ""
    next_node_id: str | None = None
    on_enter_effects: EffectBundleDef | None = None
    choices: Tuple[ChoiceDef, ...] = ()


@dataclass(frozen=True, slots=True)
class ConditionNodeDef:
    type: ClassVar[str] = "condition"

    id: str
    text: str = ""
    next_node_id: str | None = None
    on_enter_effects: EffectBundleDef | None = None
    branches: Tuple[ConditionBranchDef, ...] = ()
    default_next_node_id: str | None = None


@dataclass(frozen=True, slots=True)
class VariableNodeDef:
    type: ClassVar[str] = "variable"

    id: str
    text: str = ""
    next_node_id: str | None = None
    on_enter_effects: EffectBundleDef | None = None
    operations: Tuple[VariableOperationDef, ...] = ()


@dataclass(frozen=True, slots=True)
class ImageNodeDef:
    type: ClassVar[str] = "image"

    id: str
    text: str = ""
    next_node_id: str | None = None
    on_enter_effects: EffectBundleDef | None = None
    image: ImageDirectiveDef | None = None


@dataclass(frozen=True, slots=True)
class ChapterEndNodeDef:
    type: ClassVar[str] = "chapter_end"

    id: str
    text: str = ""
    next_node_id: str | None = None
    on_enter_effects: EffectBundleDef | None = None


@dataclass(frozen=True, slots=True)
class CustomNodeDef:
    """Node of a type the runtime does not model; it is shown like a dialogue line."""

    id: str
    node_type: str
    text: str = ""
    next_node_id: str | None = None
    on_enter_effects: EffectBundleDef | None = None
    speaker: str | None = None

    @property
    def type(self) -> str:
        return self.node_type


StoryNodeDef = Union[
    StartNodeDef,
    DialogueNodeDef,
    ChoiceNodeDef,
    ConditionNodeDef,
    VariableNodeDef,
    ImageNodeDef,
    ChapterEndNodeDef,
    CustomNodeDef,
]

TRANSPARENT_NODE_TYPES = frozenset({"variable", "condition"})


@dataclass(frozen=True, slots=True)
class ChapterDef:
    """Single playable story graph."""

    id: str
    title: str = ""
    description: str = ""
    start_node_id: str = ""
    nodes: Tuple[StoryNodeDef, ...] = ()

    def find_node(self, node_id: str | None) -> StoryNodeDef | None:
        if not node_id:
            return None
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def resolve_entry_node_id(self) -> str:
        """Explicit start id, else the first start node, else the first node."""
        if self.start_node_id:
            return self.start_node_id
        for node in self.nodes:
            if node.type == "start":
                return node.id
        if self.nodes:
            return self.nodes[0].id
        return ""


@dataclass(frozen=True, slots=True)
class StageDef:
    """Top-level save/resume unit."""

    id: str
    title: str = ""
    description: str = ""
    chapters: Tuple[ChapterDef, ...] = ()
    party_characters: Tuple[str, ...] = ()

    def find_chapter(self, chapter_id: str | None) -> ChapterDef | None:
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        return None


@dataclass(frozen=True, slots=True)
class ProjectVariablesDef:
    """Initial variable values seeded on every fresh start."""

    gold: int | None = None
    hp: int | None = None
    flags: Dict[str, Scalar] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class GameSettingsDef:
    """Presentation preferences carried through untouched."""

    default_theme_id: str | None = None
    default_game_mode: str | None = None
    title: str | None = None
    extra: Dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ResourceDef:
    id: str
    name: str
    path: str
    type: str


@dataclass(frozen=True, slots=True)
class StoryProject:
    """Whole story document."""

    name: str
    version: str = ""
    stages: Tuple[StageDef, ...] = ()
    variables: ProjectVariablesDef | None = None
    game_settings: GameSettingsDef | None = None
    resources: Tuple[ResourceDef, ...] = ()

    def find_stage(self, stage_id: str | None) -> StageDef | None:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None
