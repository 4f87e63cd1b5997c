from __future__ import annotations

import json
from pathlib import Path

import pytest

from storynode.data import DataLoadError, DataValidationError, ProjectRepository, parse_project
from storynode.domain.defs import (
    ChoiceNodeDef,
    ConditionNodeDef,
    CustomNodeDef,
    FlagCondition,
    ImageNodeDef,
    NumericCondition,
    UnknownCondition,
    VariableNodeDef,
)
from tests.helpers.story_builders import chapter_end, choice, choice_node, dialogue, raw_project, start


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_parse_project_reads_camel_case_node_fields() -> None:
    project = parse_project(
        raw_project(
            [
                start(next_node_id="pick"),
                choice_node(
                    "pick",
                    [
                        choice(
                            "climb",
                            "end",
                            condition={"type": "hp", "min": 50},
                            effects={"hp": -30, "setFlags": {"climbed": True}},
                        )
                    ],
                ),
                {
                    "id": "check",
                    "type": "condition",
                    "conditionBranches": [
                        {"condition": {"type": "flag", "flagKey": "climbed", "flagValue": True}, "nextNodeId": "end"}
                    ],
                    "defaultNextNodeId": "",
                },
                {
                    "id": "vars",
                    "type": "variable",
                    "variableOperations": [{"target": "gold", "action": "add", "value": 3}],
                    "nextNodeId": "end",
                },
                {
                    "id": "bg",
                    "type": "image",
                    "imageData": {"resourcePath": "bg.png", "layerOrder": 2, "effects": ["fadeIn"], "effectDuration": 500},
                },
                chapter_end(),
            ],
            start_node_id="start",
        )
    )
    chapter = project.stages[0].chapters[0]
    assert chapter.start_node_id == "start"

    pick = chapter.find_node("pick")
    assert isinstance(pick, ChoiceNodeDef)
    assert pick.choices[0].condition == NumericCondition(kind="hp", min=50)
    assert pick.choices[0].effects is not None and pick.choices[0].effects.hp == -30

    check = chapter.find_node("check")
    assert isinstance(check, ConditionNodeDef)
    assert check.branches[0].condition == FlagCondition(flag_key="climbed", flag_value=True)
    assert check.default_next_node_id is None

    variables = chapter.find_node("vars")
    assert isinstance(variables, VariableNodeDef)
    assert variables.operations[0].value == 3

    image = chapter.find_node("bg")
    assert isinstance(image, ImageNodeDef) and image.image is not None
    assert image.image.layer == "background"
    assert image.image.layer_order == 2
    assert image.image.has_effect is True


def test_unknown_node_type_and_condition_kind_are_kept() -> None:
    project = parse_project(
        raw_project(
            [
                {"id": "js", "type": "javascript", "text": "run()", "nextNodeId": "pick"},
                choice_node("pick", [choice("any", None, condition={"type": "weather"})]),
            ]
        )
    )
    chapter = project.stages[0].chapters[0]
    custom = chapter.find_node("js")
    assert isinstance(custom, CustomNodeDef)
    assert custom.type == "javascript"
    pick = chapter.find_node("pick")
    assert isinstance(pick, ChoiceNodeDef)
    assert pick.choices[0].condition == UnknownCondition(kind="weather")


def test_parse_project_seeds_variables_and_settings() -> None:
    raw = raw_project([start()], variables={"gold": 12, "hp": 80, "flags": {"intro": True}})
    raw["gameSettings"] = {"defaultThemeId": "retro", "title": "Demo", "fontSize": 18}
    project = parse_project(raw)
    assert project.variables is not None
    assert (project.variables.gold, project.variables.hp, project.variables.flags) == (12, 80, {"intro": True})
    assert project.game_settings is not None
    assert project.game_settings.default_theme_id == "retro"
    assert project.game_settings.extra == {"fontSize": 18}


def test_invalid_image_layer_is_rejected() -> None:
    raw = raw_project([{"id": "bg", "type": "image", "imageData": {"resourcePath": "x.png", "layer": "sky"}}])
    with pytest.raises(DataValidationError, match="layer"):
        parse_project(raw)


def test_missing_node_id_reports_context() -> None:
    raw = raw_project([{"type": "dialogue", "text": "no id"}])
    with pytest.raises(DataValidationError, match="nodes\\[0\\] id"):
        parse_project(raw)


def test_null_flag_values_are_rejected() -> None:
    raw = raw_project(
        [{"id": "meet", "type": "dialogue", "text": "Hi", "onEnterEffects": {"setFlags": {"met": None}}}]
    )
    with pytest.raises(DataValidationError, match="setFlags.met"):
        parse_project(raw)
    with pytest.raises(DataValidationError, match="flags.met"):
        parse_project(raw_project([dialogue("meet")], variables={"flags": {"met": None}}))


@pytest.mark.parametrize("key", ["gold", "hp"])
def test_negative_variable_seeds_are_rejected(key: str) -> None:
    with pytest.raises(DataValidationError, match=f"variables {key} must be non-negative"):
        parse_project(raw_project([dialogue("a")], variables={key: -5}))


def test_repository_loads_single_file(tmp_path: Path) -> None:
    path = tmp_path / "export.json"
    _write_json(path, raw_project([start(next_node_id="a"), dialogue("a"), chapter_end()]))
    repo = ProjectRepository(path)
    project = repo.load()
    assert project.name == "Test Project"
    assert repo.load() is project
    assert len(project.stages[0].chapters[0].nodes) == 3


def test_repository_assembles_folder_layout(tmp_path: Path) -> None:
    _write_json(tmp_path / "project.json", {"name": "Folder", "stages": ["s1"]})
    _write_json(tmp_path / "s1" / "stage.json", {"title": "One", "chapters": ["c1", "c2"]})
    _write_json(tmp_path / "s1" / "c1.json", {"startNodeId": "start", "nodes": [start()]})
    _write_json(tmp_path / "s1" / "c2.json", {"id": "c2", "nodes": []})
    project = ProjectRepository(tmp_path).load()
    stage = project.find_stage("s1")
    assert stage is not None
    assert [chapter.id for chapter in stage.chapters] == ["c1", "c2"]


def test_repository_rejects_mismatched_stage_id(tmp_path: Path) -> None:
    _write_json(tmp_path / "project.json", {"name": "Folder", "stages": ["s1"]})
    _write_json(tmp_path / "s1" / "stage.json", {"id": "other", "chapters": []})
    with pytest.raises(DataValidationError, match="expected 's1'"):
        ProjectRepository(tmp_path).load()


def test_repository_reports_missing_chapter_file(tmp_path: Path) -> None:
    _write_json(tmp_path / "project.json", {"name": "Folder", "stages": ["s1"]})
    _write_json(tmp_path / "s1" / "stage.json", {"chapters": ["gone"]})
    with pytest.raises(DataLoadError):
        ProjectRepository(tmp_path).load()


def test_bundled_demo_project_loads() -> None:
    project = ProjectRepository().load()
    stage = project.stages[0]
    chapter = stage.chapters[0]
    assert stage.id == "stage_1"
    assert chapter.resolve_entry_node_id() == "start"
    assert project.game_settings is not None and project.game_settings.default_theme_id == "novel"
