"""File-system helpers for save slot storage."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from storynode.presentation.cli import config


@dataclass(slots=True)
class SlotMetadata:
    """Describes the contents of a save slot for menu display."""

    slot: int
    exists: bool
    metadata: Dict[str, Any] | None = None
    is_corrupt: bool = False


class SaveSlotStore:
    """Stores engine save text in numbered slot files, one directory per project."""

    def __init__(self, project_name: str, base_dir: Path | str | None = None, slot_count: int = 3) -> None:
        root = Path(base_dir) if base_dir is not None else config.get_save_dir()
        self._base_dir = root / _slugify(project_name)
        self._slot_count = slot_count

    @property
    def slot_count(self) -> int:
        return self._slot_count

    def list_slots(self) -> List[SlotMetadata]:
        slots: List[SlotMetadata] = []
        for slot_index in range(1, self._slot_count + 1):
            path = self._slot_path(slot_index)
            if not path.exists():
                slots.append(SlotMetadata(slot=slot_index, exists=False))
                continue
            try:
                payload = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                slots.append(SlotMetadata(slot=slot_index, exists=True, is_corrupt=True))
                continue
            raw_metadata = payload.get("metadata") if isinstance(payload, dict) else None
            metadata = raw_metadata if isinstance(raw_metadata, dict) else None
            slots.append(SlotMetadata(slot=slot_index, exists=True, metadata=metadata))
        return slots

    def slot_exists(self, slot: int) -> bool:
        self._validate_slot(slot)
        return self._slot_path(slot).exists()

    def read_slot(self, slot: int) -> str:
        """Return the engine save text stored in the requested slot."""
        self._validate_slot(slot)
        payload = json.loads(self._slot_path(slot).read_text(encoding="utf-8"))
        if not isinstance(payload, dict) or not isinstance(payload.get("save"), str):
            raise ValueError(f"Slot {slot} does not contain save data.")
        return payload["save"]

    def write_slot(self, slot: int, save_data: str, metadata: Dict[str, Any] | None = None) -> None:
        """Persist engine save text plus display metadata into the requested slot."""
        self._validate_slot(slot)
        self._base_dir.mkdir(parents=True, exist_ok=True)
        payload = {"metadata": metadata or {}, "save": save_data}
        self._slot_path(slot).write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

    def delete_slot(self, slot: int) -> None:
        self._validate_slot(slot)
        try:
            self._slot_path(slot).unlink()
        except FileNotFoundError:
            return

    def _slot_path(self, slot: int) -> Path:
        return self._base_dir / f"slot_{slot}.json"

    def _validate_slot(self, slot: int) -> None:
        if not 1 <= slot <= self._slot_count:
            raise ValueError(f"Slot index must be between 1 and {self._slot_count}.")


def _slugify(name: str) -> str:
    slug = "".join(char.lower() if char.isalnum() else "_" for char in name).strip("_")
    return slug or "project"
