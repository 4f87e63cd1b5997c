"""Parses raw story JSON (editor camelCase keys) into typed definitions."""
from __future__ import annotations

from typing import Dict, List

from storynode.data.errors import DataValidationError
from storynode.data.repositories.base import ValidationHelpers
from storynode.domain.defs import (
    AffectionChange,
    AffectionCondition,
    ChapterDef,
    ChapterEndNodeDef,
    ChoiceDef,
    ChoiceMadeCondition,
    ChoiceNodeDef,
    ConditionBranchDef,
    ConditionDef,
    ConditionNodeDef,
    CustomNodeDef,
    DialogueNodeDef,
    EffectBundleDef,
    FlagCondition,
    GameSettingsDef,
    ImageDirectiveDef,
    ImageNodeDef,
    NumericCondition,
    ProjectVariablesDef,
    ReputationChange,
    ReputationCondition,
    ResourceDef,
    StageDef,
    StartNodeDef,
    StoryNodeDef,
    StoryProject,
    UnknownCondition,
    VariableNodeDef,
    VariableOperationDef,
)

_IMAGE_LAYERS = ("background", "character")
_ALIGNMENTS = ("left", "center", "right")
_KNOWN_SETTINGS_KEYS = ("defaultThemeId", "defaultGameMode", "title")


class StoryDocumentParser(ValidationHelpers):
    """Builds a StoryProject from already-assembled JSON data."""

    def parse_project(self, raw: object) -> StoryProject:
        data = self._require_mapping(raw, "project")
        name = self._optional_str(data.get("name"), "project name") or ""
        version = data.get("version", "")
        if isinstance(version, (int, float)) and not isinstance(version, bool):
            version = str(version)
        version = self._optional_str(version, "project version") or ""
        stages = tuple(
            self.parse_stage(entry, f"project stages[{index}]")
            for index, entry in enumerate(self._require_list(data.get("stages"), "project stages"))
        )
        return StoryProject(
            name=name,
            version=version,
            stages=stages,
            variables=self._parse_variables(data.get("variables")),
            game_settings=self._parse_settings(data.get("gameSettings")),
            resources=self._parse_resources(data.get("resources")),
        )

    def parse_stage(self, raw: object, context: str = "stage") -> StageDef:
        data = self._require_mapping(raw, context)
        stage_id = self._require_str(data.get("id"), f"{context} id")
        chapters = tuple(
            self.parse_chapter(entry, f"stage '{stage_id}' chapters[{index}]")
            for index, entry in enumerate(self._require_list(data.get("chapters"), f"stage '{stage_id}' chapters"))
        )
        party = tuple(
            self._require_str(member, f"stage '{stage_id}' partyCharacters[{index}]")
            for index, member in enumerate(
                self._require_list(data.get("partyCharacters"), f"stage '{stage_id}' partyCharacters")
            )
        )
        return StageDef(
            id=stage_id,
            title=self._optional_str(data.get("title"), f"stage '{stage_id}' title") or "",
            description=self._optional_str(data.get("description"), f"stage '{stage_id}' description") or "",
            chapters=chapters,
            party_characters=party,
        )

    def parse_chapter(self, raw: object, context: str = "chapter") -> ChapterDef:
        data = self._require_mapping(raw, context)
        chapter_id = self._require_str(data.get("id"), f"{context} id")
        nodes = tuple(
            self.parse_node(entry, f"chapter '{chapter_id}' nodes[{index}]")
            for index, entry in enumerate(self._require_list(data.get("nodes"), f"chapter '{chapter_id}' nodes"))
        )
        return ChapterDef(
            id=chapter_id,
            title=self._optional_str(data.get("title"), f"chapter '{chapter_id}' title") or "",
            description=self._optional_str(data.get("description"), f"chapter '{chapter_id}' description") or "",
            start_node_id=self._optional_str(data.get("startNodeId"), f"chapter '{chapter_id}' startNodeId") or "",
            nodes=nodes,
        )

    def parse_node(self, raw: object, context: str = "node") -> StoryNodeDef:
        data = self._require_mapping(raw, context)
        node_id = self._require_str(data.get("id"), f"{context} id")
        node_ctx = f"story node '{node_id}'"
        node_type = self._require_str(data.get("type"), f"{node_ctx} type")
        text = self._optional_str(data.get("text"), f"{node_ctx} text") or ""
        next_node_id = self._optional_target(data.get("nextNodeId"), f"{node_ctx} nextNodeId")
        on_enter = self.parse_effects(data.get("onEnterEffects"), f"{node_ctx} onEnterEffects")
        common = dict(id=node_id, text=text, next_node_id=next_node_id, on_enter_effects=on_enter)

        if node_type == "start":
            return StartNodeDef(**common)
        if node_type == "dialogue":
            speaker = self._optional_str(data.get("speaker"), f"{node_ctx} speaker")
            return DialogueNodeDef(speaker=speaker, **common)
        if node_type == "choice":
            choices = tuple(
                self.parse_choice(entry, f"{node_ctx} choices[{index}]")
                for index, entry in enumerate(self._require_list(data.get("choices"), f"{node_ctx} choices"))
            )
            return ChoiceNodeDef(choices=choices, **common)
        if node_type == "condition":
            branches = tuple(
                self._parse_branch(entry, f"{node_ctx} conditionBranches[{index}]")
                for index, entry in enumerate(
                    self._require_list(data.get("conditionBranches"), f"{node_ctx} conditionBranches")
                )
            )
            default_next = self._optional_target(data.get("defaultNextNodeId"), f"{node_ctx} defaultNextNodeId")
            return ConditionNodeDef(branches=branches, default_next_node_id=default_next, **common)
        if node_type == "variable":
            operations = tuple(
                self.parse_variable_operation(entry, f"{node_ctx} variableOperations[{index}]")
                for index, entry in enumerate(
                    self._require_list(data.get("variableOperations"), f"{node_ctx} variableOperations")
                )
            )
            return VariableNodeDef(operations=operations, **common)
        if node_type == "image":
            image = None
            if data.get("imageData") is not None:
                image = self.parse_image(data.get("imageData"), f"{node_ctx} imageData")
            return ImageNodeDef(image=image, **common)
        if node_type == "chapter_end":
            return ChapterEndNodeDef(**common)
        speaker = self._optional_str(data.get("speaker"), f"{node_ctx} speaker")
        return CustomNodeDef(node_type=node_type, speaker=speaker, **common)

    def parse_choice(self, raw: object, context: str) -> ChoiceDef:
        data = self._require_mapping(raw, context)
        choice_id = self._require_str(data.get("id"), f"{context} id")
        condition = None
        if data.get("condition") is not None:
            condition = self.parse_condition(data.get("condition"), f"{context} condition")
        return ChoiceDef(
            id=choice_id,
            text=self._optional_str(data.get("text"), f"{context} text") or "",
            next_node_id=self._optional_target(data.get("nextNodeId"), f"{context} nextNodeId"),
            condition=condition,
            effects=self.parse_effects(data.get("effects"), f"{context} effects"),
        )

    def parse_condition(self, raw: object, context: str) -> ConditionDef:
        data = self._require_mapping(raw, context)
        kind = self._require_str(data.get("type"), f"{context} type")
        if kind in ("gold", "hp"):
            return NumericCondition(kind=kind, **self._parse_range(data, context))
        if kind == "flag":
            return FlagCondition(
                flag_key=self._optional_str(data.get("flagKey"), f"{context} flagKey"),
                flag_value=self._optional_scalar(data.get("flagValue"), f"{context} flagValue"),
            )
        if kind == "choice_made":
            return ChoiceMadeCondition(choice_id=self._optional_str(data.get("choiceId"), f"{context} choiceId"))
        if kind == "affection":
            return AffectionCondition(
                character_id=self._optional_str(data.get("characterId"), f"{context} characterId"),
                **self._parse_range(data, context),
            )
        if kind == "reputation":
            return ReputationCondition(
                faction_id=self._optional_str(data.get("factionId"), f"{context} factionId"),
                **self._parse_range(data, context),
            )
        return UnknownCondition(kind=kind)

    def parse_effects(self, raw: object, context: str) -> EffectBundleDef | None:
        if raw is None:
            return None
        data = self._require_mapping(raw, context)
        set_flags_raw = data.get("setFlags")
        set_flags: Dict[str, object] = {}
        if set_flags_raw is not None:
            for key, value in self._require_mapping(set_flags_raw, f"{context} setFlags").items():
                set_flags[key] = self._require_scalar(value, f"{context} setFlags.{key}")
        affection: List[AffectionChange] = []
        for index, entry in enumerate(self._require_list(data.get("affection"), f"{context} affection")):
            entry_ctx = f"{context} affection[{index}]"
            change = self._require_mapping(entry, entry_ctx)
            affection.append(
                AffectionChange(
                    character_id=self._require_str(change.get("characterId"), f"{entry_ctx} characterId"),
                    delta=self._optional_int(change.get("delta"), f"{entry_ctx} delta") or 0,
                )
            )
        reputation: List[ReputationChange] = []
        for index, entry in enumerate(self._require_list(data.get("reputation"), f"{context} reputation")):
            entry_ctx = f"{context} reputation[{index}]"
            change = self._require_mapping(entry, entry_ctx)
            reputation.append(
                ReputationChange(
                    faction_id=self._require_str(change.get("factionId"), f"{entry_ctx} factionId"),
                    delta=self._optional_int(change.get("delta"), f"{entry_ctx} delta") or 0,
                )
            )
        return EffectBundleDef(
            gold=self._optional_int(data.get("gold"), f"{context} gold"),
            hp=self._optional_int(data.get("hp"), f"{context} hp"),
            set_flags=set_flags,
            affection=tuple(affection),
            reputation=tuple(reputation),
        )

    def parse_variable_operation(self, raw: object, context: str) -> VariableOperationDef:
        data = self._require_mapping(raw, context)
        value = self._optional_scalar(data.get("value"), f"{context} value")
        return VariableOperationDef(
            target=self._require_str(data.get("target"), f"{context} target"),
            action=self._require_str(data.get("action"), f"{context} action"),
            value=0 if value is None else value,
            key=self._optional_str(data.get("key"), f"{context} key"),
            character_id=self._optional_str(data.get("characterId"), f"{context} characterId"),
            faction_id=self._optional_str(data.get("factionId"), f"{context} factionId"),
        )

    def parse_image(self, raw: object, context: str) -> ImageDirectiveDef:
        data = self._require_mapping(raw, context)
        layer = self._optional_str(data.get("layer"), f"{context} layer") or "background"
        if layer not in _IMAGE_LAYERS:
            raise DataValidationError(f"{context} layer must be one of {', '.join(_IMAGE_LAYERS)}.")
        alignment = self._optional_str(data.get("alignment"), f"{context} alignment") or "center"
        if alignment not in _ALIGNMENTS:
            raise DataValidationError(f"{context} alignment must be one of {', '.join(_ALIGNMENTS)}.")
        effects = tuple(
            self._require_str(effect, f"{context} effects[{index}]")
            for index, effect in enumerate(self._require_list(data.get("effects"), f"{context} effects"))
        )
        return ImageDirectiveDef(
            resource_path=self._optional_str(data.get("resourcePath"), f"{context} resourcePath") or "",
            layer=layer,
            layer_order=self._optional_int(data.get("layerOrder"), f"{context} layerOrder") or 0,
            alignment=alignment,
            x=self._optional_number(data.get("x"), f"{context} x"),
            y=self._optional_number(data.get("y"), f"{context} y"),
            flip_horizontal=self._optional_bool(data.get("flipHorizontal"), f"{context} flipHorizontal"),
            object_fit=self._optional_str(data.get("objectFit"), f"{context} objectFit"),
            effect=self._optional_str(data.get("effect"), f"{context} effect"),
            effects=effects,
            effect_duration=self._optional_int(data.get("effectDuration"), f"{context} effectDuration") or 0,
        )

    def _parse_branch(self, raw: object, context: str) -> ConditionBranchDef:
        data = self._require_mapping(raw, context)
        return ConditionBranchDef(
            condition=self.parse_condition(data.get("condition"), f"{context} condition"),
            next_node_id=self._optional_target(data.get("nextNodeId"), f"{context} nextNodeId"),
            id=self._optional_str(data.get("id"), f"{context} id"),
        )

    def _parse_range(self, data: dict[str, object], context: str) -> dict[str, float | None]:
        return {
            "value": self._optional_number(data.get("value"), f"{context} value"),
            "min": self._optional_number(data.get("min"), f"{context} min"),
            "max": self._optional_number(data.get("max"), f"{context} max"),
        }

    def _parse_variables(self, raw: object) -> ProjectVariablesDef | None:
        if raw is None:
            return None
        data = self._require_mapping(raw, "project variables")
        flags: Dict[str, object] = {}
        if data.get("flags") is not None:
            for key, value in self._require_mapping(data.get("flags"), "project variables flags").items():
                flags[key] = self._require_scalar(value, f"project variables flags.{key}")
        return ProjectVariablesDef(
            gold=self._optional_non_negative_int(data.get("gold"), "project variables gold"),
            hp=self._optional_non_negative_int(data.get("hp"), "project variables hp"),
            flags=flags,
        )

    def _parse_settings(self, raw: object) -> GameSettingsDef | None:
        if raw is None:
            return None
        data = self._require_mapping(raw, "project gameSettings")
        return GameSettingsDef(
            default_theme_id=self._optional_str(data.get("defaultThemeId"), "gameSettings defaultThemeId"),
            default_game_mode=self._optional_str(data.get("defaultGameMode"), "gameSettings defaultGameMode"),
            title=self._optional_str(data.get("title"), "gameSettings title"),
            extra={key: value for key, value in data.items() if key not in _KNOWN_SETTINGS_KEYS},
        )

    def _parse_resources(self, raw: object) -> tuple[ResourceDef, ...]:
        if raw is None:
            return ()
        if isinstance(raw, dict):
            # Player export form groups resources by kind: {"images": [...], "audio": [...]}.
            entries = [entry for group in raw.values() for entry in self._require_list(group, "project resources")]
        else:
            entries = self._require_list(raw, "project resources")
        resources: List[ResourceDef] = []
        for index, entry in enumerate(entries):
            entry_ctx = f"project resources[{index}]"
            data = self._require_mapping(entry, entry_ctx)
            resources.append(
                ResourceDef(
                    id=self._require_str(data.get("id"), f"{entry_ctx} id"),
                    name=self._optional_str(data.get("name"), f"{entry_ctx} name") or "",
                    path=self._require_str(data.get("path"), f"{entry_ctx} path"),
                    type=self._optional_str(data.get("type"), f"{entry_ctx} type") or "",
                )
            )
        return tuple(resources)


def parse_project(raw: object) -> StoryProject:
    """Parse an in-memory project mapping."""
    return StoryDocumentParser().parse_project(raw)
