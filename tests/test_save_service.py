from __future__ import annotations

import json

import pytest

from storynode.domain.state import ActiveImage, GameState, GameVariables, HistoryEntry, HistoryImageData
from storynode.services.errors import SaveLoadError
from storynode.services.save_service import SaveService
from tests.helpers.story_builders import chapter_end, dialogue, make_project, start


def _make_state() -> GameState:
    return GameState(
        current_node_id="a",
        current_stage_id="stage_1",
        current_chapter_id="chapter_1",
        variables=GameVariables(
            gold=4,
            hp=70,
            flags={"door": "open", "visits": 2},
            affection={"mira": 1},
            reputation={"guild": -1},
            choices_made=["left"],
        ),
        history=[
            HistoryEntry(node_id="a", type="dialogue", content="Hi", timestamp=1.0, speaker="Mira"),
            HistoryEntry(
                node_id="bg",
                type="image",
                content="",
                timestamp=2.0,
                image=HistoryImageData(resource_path="bg.png", layer="background", is_removal=False, effect="fadeIn"),
            ),
        ],
        active_images=[
            ActiveImage(id="bg", instance_id=3, resource_path="bg.png", layer="background", x=0.5, effect="fadeIn"),
        ],
        started_at=100.0,
        play_time=50.0,
    )


def _payload(service: SaveService) -> dict:
    return json.loads(service.dumps(_make_state()))


def test_dumps_uses_camel_case_shape() -> None:
    payload = _payload(SaveService())
    assert payload["saveVersion"] == SaveService.SAVE_VERSION
    assert payload["currentNodeId"] == "a"
    assert payload["variables"]["choicesMade"] == ["left"]
    assert payload["activeImages"][0]["instanceId"] == 3
    assert payload["history"][0]["speaker"] == "Mira"
    assert "choiceText" not in payload["history"][0]


def test_round_trip_restores_state() -> None:
    service = SaveService()
    state = _make_state()
    assert service.loads(service.dumps(state)) == state


def test_play_time_override_is_written() -> None:
    payload = json.loads(SaveService().dumps(_make_state(), play_time=75.0))
    assert payload["playTime"] == 75.0


def test_unknown_keys_are_ignored_and_missing_keys_default() -> None:
    state = SaveService().deserialize({"currentNodeId": "a", "futureField": {"x": 1}})
    assert state.current_node_id == "a"
    assert state.variables == GameVariables()
    assert state.history == []


def test_invalid_json_is_rejected() -> None:
    with pytest.raises(SaveLoadError, match="not valid JSON"):
        SaveService().loads("{not json")


@pytest.mark.parametrize(
    "mutate",
    [
        lambda payload: payload.update(saveVersion=99),
        lambda payload: payload["variables"].update(gold=-5),
        lambda payload: payload["variables"].update(hp="full"),
        lambda payload: payload.update(history="oops"),
        lambda payload: payload["activeImages"][0].update(layer="sky"),
        lambda payload: payload["activeImages"].append(dict(payload["activeImages"][0], instanceId=4)),
    ],
)
def test_malformed_payloads_are_rejected(mutate) -> None:
    service = SaveService()
    payload = _payload(service)
    mutate(payload)
    with pytest.raises(SaveLoadError):
        service.deserialize(payload)


def test_position_is_checked_against_project() -> None:
    project = make_project([start(next_node_id="a"), dialogue("a"), chapter_end()])
    service = SaveService(project)
    payload = _payload(service)
    assert service.deserialize(payload).current_node_id == "a"

    payload["currentNodeId"] = "ghost"
    with pytest.raises(SaveLoadError, match="ghost"):
        service.deserialize(payload)
    payload["currentChapterId"] = "missing"
    with pytest.raises(SaveLoadError, match="chapter"):
        service.deserialize(payload)
