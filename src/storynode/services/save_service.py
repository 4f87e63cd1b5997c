"""Serialization helpers for save/load."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping

from storynode.domain.defs import StoryProject
from storynode.domain.state import (
    DEFAULT_GOLD,
    DEFAULT_HP,
    ActiveImage,
    GameState,
    GameVariables,
    HistoryEntry,
    HistoryImageData,
)
from storynode.services.errors import SaveLoadError

SavePayload = Dict[str, Any]
_IMAGE_LAYERS = ("background", "character")
_ALIGNMENTS = ("left", "center", "right")


class SaveService:
    """Converts runtime state to/from the player's JSON save shape."""

    SAVE_VERSION = 1

    def __init__(self, project: StoryProject | None = None) -> None:
        self._project = project

    def dumps(self, state: GameState, *, play_time: float | None = None) -> str:
        """Return save text; ``play_time`` overrides the stored accumulated play time."""
        return json.dumps(self.serialize(state, play_time=play_time), ensure_ascii=False)

    def loads(self, text: str) -> GameState:
        try:
            payload = json.loads(text)
        except (TypeError, ValueError) as exc:
            raise SaveLoadError(f"Save data is not valid JSON: {exc}") from exc
        return self.deserialize(payload)

    def serialize(self, state: GameState, *, play_time: float | None = None) -> SavePayload:
        """Return a JSON-serializable payload for persistence."""
        return {
            "saveVersion": self.SAVE_VERSION,
            "currentNodeId": state.current_node_id,
            "currentStageId": state.current_stage_id,
            "currentChapterId": state.current_chapter_id,
            "variables": self._serialize_variables(state.variables),
            "history": [self._serialize_history_entry(entry) for entry in state.history],
            "activeImages": [self._serialize_image(image) for image in state.active_images],
            "startedAt": state.started_at,
            "playTime": state.play_time if play_time is None else play_time,
        }

    def deserialize(self, payload: object) -> GameState:
        """Rehydrate a GameState; unknown keys are ignored, malformed known keys are rejected."""
        if not isinstance(payload, Mapping):
            raise SaveLoadError("Save data must be a JSON object.")
        version = payload.get("saveVersion")
        if version is not None and version != self.SAVE_VERSION:
            raise SaveLoadError(f"Unsupported save version: {version!r}.")

        state = GameState(
            current_node_id=self._coerce_str(payload.get("currentNodeId"), "currentNodeId"),
            current_stage_id=self._coerce_str(payload.get("currentStageId"), "currentStageId"),
            current_chapter_id=self._coerce_str(payload.get("currentChapterId"), "currentChapterId"),
            variables=self._coerce_variables(payload.get("variables")),
            history=[
                self._coerce_history_entry(entry, f"history[{index}]")
                for index, entry in enumerate(self._coerce_list(payload.get("history"), "history"))
            ],
            active_images=[
                self._coerce_image(entry, f"activeImages[{index}]")
                for index, entry in enumerate(self._coerce_list(payload.get("activeImages"), "activeImages"))
            ],
            started_at=self._coerce_number(payload.get("startedAt"), "startedAt", default=0.0),
            play_time=self._coerce_number(payload.get("playTime"), "playTime", default=0.0),
        )
        self._validate_position(state)
        self._validate_image_slots(state.active_images)
        return state

    @staticmethod
    def _serialize_variables(variables: GameVariables) -> Dict[str, Any]:
        return {
            "gold": variables.gold,
            "hp": variables.hp,
            "flags": dict(variables.flags),
            "affection": dict(variables.affection),
            "reputation": dict(variables.reputation),
            "choicesMade": list(variables.choices_made),
        }

    @staticmethod
    def _serialize_history_entry(entry: HistoryEntry) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "nodeId": entry.node_id,
            "type": entry.type,
            "content": entry.content,
            "timestamp": entry.timestamp,
        }
        if entry.speaker is not None:
            payload["speaker"] = entry.speaker
        if entry.choice_text is not None:
            payload["choiceText"] = entry.choice_text
        if entry.image is not None:
            image_payload: Dict[str, Any] = {
                "resourcePath": entry.image.resource_path,
                "layer": entry.image.layer,
                "isRemoval": entry.image.is_removal,
                "effects": list(entry.image.effects),
                "effectDuration": entry.image.effect_duration,
            }
            if entry.image.effect is not None:
                image_payload["effect"] = entry.image.effect
            payload["imageData"] = image_payload
        return payload

    @staticmethod
    def _serialize_image(image: ActiveImage) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": image.id,
            "instanceId": image.instance_id,
            "resourcePath": image.resource_path,
            "layer": image.layer,
            "layerOrder": image.layer_order,
            "alignment": image.alignment,
            "flipHorizontal": image.flip_horizontal,
            "effects": list(image.effects),
            "effectDuration": image.effect_duration,
        }
        for key, value in (("x", image.x), ("y", image.y), ("objectFit", image.object_fit), ("effect", image.effect)):
            if value is not None:
                payload[key] = value
        return payload

    def _coerce_variables(self, raw: object) -> GameVariables:
        if raw is None:
            return GameVariables()
        data = self._require_mapping(raw, "variables")
        return GameVariables(
            gold=self._coerce_non_negative_int(data.get("gold"), "variables.gold", default=DEFAULT_GOLD),
            hp=self._coerce_non_negative_int(data.get("hp"), "variables.hp", default=DEFAULT_HP),
            flags=self._coerce_scalar_dict(data.get("flags"), "variables.flags"),
            affection=self._coerce_number_dict(data.get("affection"), "variables.affection"),
            reputation=self._coerce_number_dict(data.get("reputation"), "variables.reputation"),
            choices_made=[
                self._require_str(entry, f"variables.choicesMade[{index}]")
                for index, entry in enumerate(self._coerce_list(data.get("choicesMade"), "variables.choicesMade"))
            ],
        )

    def _coerce_history_entry(self, raw: object, context: str) -> HistoryEntry:
        data = self._require_mapping(raw, context)
        image = None
        if data.get("imageData") is not None:
            image_data = self._require_mapping(data.get("imageData"), f"{context}.imageData")
            image = HistoryImageData(
                resource_path=self._coerce_str(image_data.get("resourcePath"), f"{context}.imageData.resourcePath"),
                layer=self._coerce_layer(image_data.get("layer"), f"{context}.imageData.layer"),
                is_removal=bool(image_data.get("isRemoval", False)),
                effect=self._coerce_optional_str(image_data.get("effect"), f"{context}.imageData.effect"),
                effects=self._coerce_str_tuple(image_data.get("effects"), f"{context}.imageData.effects"),
                effect_duration=self._coerce_non_negative_int(
                    image_data.get("effectDuration"), f"{context}.imageData.effectDuration", default=0
                ),
            )
        return HistoryEntry(
            node_id=self._require_str(data.get("nodeId"), f"{context}.nodeId"),
            type=self._require_str(data.get("type"), f"{context}.type"),
            content=self._coerce_str(data.get("content"), f"{context}.content"),
            timestamp=self._coerce_number(data.get("timestamp"), f"{context}.timestamp", default=0.0),
            speaker=self._coerce_optional_str(data.get("speaker"), f"{context}.speaker"),
            choice_text=self._coerce_optional_str(data.get("choiceText"), f"{context}.choiceText"),
            image=image,
        )

    def _coerce_image(self, raw: object, context: str) -> ActiveImage:
        data = self._require_mapping(raw, context)
        alignment = data.get("alignment") or "center"
        if alignment not in _ALIGNMENTS:
            raise SaveLoadError(f"{context}.alignment is not a known alignment.")
        instance_id = data.get("instanceId")
        if not isinstance(instance_id, int) or isinstance(instance_id, bool):
            raise SaveLoadError(f"{context}.instanceId must be an integer.")
        return ActiveImage(
            id=self._coerce_str(data.get("id"), f"{context}.id"),
            instance_id=instance_id,
            resource_path=self._require_str(data.get("resourcePath"), f"{context}.resourcePath"),
            layer=self._coerce_layer(data.get("layer"), f"{context}.layer"),
            layer_order=self._coerce_int(data.get("layerOrder"), f"{context}.layerOrder", default=0),
            alignment=alignment,
            x=self._coerce_optional_number(data.get("x"), f"{context}.x"),
            y=self._coerce_optional_number(data.get("y"), f"{context}.y"),
            flip_horizontal=bool(data.get("flipHorizontal", False)),
            object_fit=self._coerce_optional_str(data.get("objectFit"), f"{context}.objectFit"),
            effect=self._coerce_optional_str(data.get("effect"), f"{context}.effect"),
            effects=self._coerce_str_tuple(data.get("effects"), f"{context}.effects"),
            effect_duration=self._coerce_non_negative_int(
                data.get("effectDuration"), f"{context}.effectDuration", default=0
            ),
        )

    def _validate_position(self, state: GameState) -> None:
        if self._project is None or not state.current_stage_id:
            return
        stage = self._project.find_stage(state.current_stage_id)
        if stage is None:
            raise SaveLoadError(f"Saved stage '{state.current_stage_id}' does not exist in this project.")
        chapter = stage.find_chapter(state.current_chapter_id)
        if chapter is None:
            raise SaveLoadError(f"Saved chapter '{state.current_chapter_id}' does not exist in this project.")
        if state.current_node_id and chapter.find_node(state.current_node_id) is None:
            raise SaveLoadError(f"Saved node '{state.current_node_id}' does not exist in this project.")

    @staticmethod
    def _validate_image_slots(images: List[ActiveImage]) -> None:
        seen: set[tuple[str, int]] = set()
        for image in images:
            if image.slot in seen:
                raise SaveLoadError(f"Two active images occupy slot {image.slot}.")
            seen.add(image.slot)

    @staticmethod
    def _require_mapping(value: object, context: str) -> Mapping[str, Any]:
        if not isinstance(value, Mapping):
            raise SaveLoadError(f"{context} must be an object.")
        return value

    @staticmethod
    def _coerce_list(value: object, context: str) -> List[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise SaveLoadError(f"{context} must be a list.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise SaveLoadError(f"{context} must be a string.")
        return value

    @staticmethod
    def _coerce_str(value: object, context: str) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise SaveLoadError(f"{context} must be a string.")
        return value

    @staticmethod
    def _coerce_optional_str(value: object, context: str) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise SaveLoadError(f"{context} must be a string if provided.")
        return value

    @staticmethod
    def _coerce_str_tuple(value: object, context: str) -> tuple[str, ...]:
        if value is None:
            return ()
        if not isinstance(value, list) or not all(isinstance(entry, str) for entry in value):
            raise SaveLoadError(f"{context} must be a list of strings.")
        return tuple(value)

    @staticmethod
    def _coerce_number(value: object, context: str, *, default: float) -> float:
        if value is None:
            return default
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SaveLoadError(f"{context} must be a number.")
        return value

    @staticmethod
    def _coerce_optional_number(value: object, context: str) -> float | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SaveLoadError(f"{context} must be a number if provided.")
        return value

    @staticmethod
    def _coerce_int(value: object, context: str, *, default: int) -> int:
        if value is None:
            return default
        if isinstance(value, bool) or not isinstance(value, int):
            raise SaveLoadError(f"{context} must be an integer.")
        return value

    @classmethod
    def _coerce_non_negative_int(cls, value: object, context: str, *, default: int) -> int:
        coerced = cls._coerce_int(value, context, default=default)
        if coerced < 0:
            raise SaveLoadError(f"{context} must be non-negative.")
        return coerced

    @staticmethod
    def _coerce_layer(value: object, context: str) -> str:
        if value not in _IMAGE_LAYERS:
            raise SaveLoadError(f"{context} must be one of {', '.join(_IMAGE_LAYERS)}.")
        return value

    @staticmethod
    def _coerce_scalar_dict(value: object, context: str) -> Dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise SaveLoadError(f"{context} must be an object.")
        result: Dict[str, Any] = {}
        for key, entry in value.items():
            if not isinstance(entry, (int, float, str, bool)):
                raise SaveLoadError(f"{context}.{key} must be a number, string or boolean.")
            result[str(key)] = entry
        return result

    @staticmethod
    def _coerce_number_dict(value: object, context: str) -> Dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise SaveLoadError(f"{context} must be an object.")
        result: Dict[str, Any] = {}
        for key, entry in value.items():
            if isinstance(entry, bool) or not isinstance(entry, (int, float)):
                raise SaveLoadError(f"{context}.{key} must be a number.")
            result[str(key)] = entry
        return result
