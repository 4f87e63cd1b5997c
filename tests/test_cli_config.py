from __future__ import annotations

import json
from pathlib import Path

import pytest

from storynode.presentation.cli import config
from storynode.presentation.cli.save_slots import SaveSlotStore


def test_load_config_defaults_when_missing(tmp_path: Path) -> None:
    assert config.load_config(tmp_path / "config.json") == {"text_display_mode": "typewriter", "theme_id": "dark"}


def test_config_round_trip_and_normalization(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"
    config.save_config({"text_display_mode": "fade", "theme_id": "retro"}, path)
    assert config.load_config(path) == {"text_display_mode": "fade", "theme_id": "retro"}

    path.write_text(json.dumps({"text_display_mode": "scroll", "theme_id": "neon"}), encoding="utf-8")
    assert config.load_config(path) == config.default_config()


def test_corrupt_config_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{oops", encoding="utf-8")
    assert config.load_config(path) == config.default_config()
    path.write_text("[1, 2]", encoding="utf-8")
    assert config.load_config(path) == config.default_config()


def test_user_data_dir_under_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config.os, "name", "posix")
    monkeypatch.setattr(config.Path, "home", classmethod(lambda cls: tmp_path))
    assert config.get_save_dir() == tmp_path / ".config" / "storynode" / "saves"


def test_save_slots_round_trip(tmp_path: Path) -> None:
    store = SaveSlotStore("Crossroads Demo", base_dir=tmp_path)
    store.write_slot(2, '{"currentNodeId": "a"}', {"node": "a"})
    assert (tmp_path / "crossroads_demo" / "slot_2.json").exists()
    assert store.read_slot(2) == '{"currentNodeId": "a"}'
    slots = store.list_slots()
    assert [slot.exists for slot in slots] == [False, True, False]
    assert slots[1].metadata == {"node": "a"}


def test_save_slots_flag_corrupt_files(tmp_path: Path) -> None:
    store = SaveSlotStore("demo", base_dir=tmp_path)
    (tmp_path / "demo").mkdir()
    (tmp_path / "demo" / "slot_1.json").write_text("not json", encoding="utf-8")
    (tmp_path / "demo" / "slot_3.json").write_text(json.dumps({"metadata": {}}), encoding="utf-8")
    assert store.list_slots()[0].is_corrupt is True
    with pytest.raises(ValueError, match="does not contain save data"):
        store.read_slot(3)


def test_save_slots_validate_index_and_delete(tmp_path: Path) -> None:
    store = SaveSlotStore("demo", base_dir=tmp_path)
    with pytest.raises(ValueError):
        store.write_slot(4, "{}")
    store.write_slot(1, "{}")
    store.delete_slot(1)
    store.delete_slot(1)
    assert store.slot_exists(1) is False
