from __future__ import annotations

import pytest

from storynode.domain.defs import ChoiceDef, ChoiceNodeDef, DialogueNodeDef, ImageDirectiveDef, ImageNodeDef
from storynode.domain.state import HistoryEntry
from storynode.services.history import IMAGE_REMOVED_CONTENT, HistoryRecorder


def test_record_node_copies_text_and_speaker() -> None:
    history: list[HistoryEntry] = []
    recorder = HistoryRecorder()
    node = DialogueNodeDef(id="d1", text="Hello", speaker="Mira")
    assert recorder.record_node(history, node, 5.0) is True
    assert history == [HistoryEntry(node_id="d1", type="dialogue", content="Hello", timestamp=5.0, speaker="Mira")]


def test_record_node_suppresses_consecutive_duplicate() -> None:
    history: list[HistoryEntry] = []
    recorder = HistoryRecorder()
    node = DialogueNodeDef(id="d1", text="Hello")
    recorder.record_node(history, node, 1.0)
    assert recorder.record_node(history, node, 2.0) is False
    recorder.record_node(history, DialogueNodeDef(id="d2"), 3.0)
    assert recorder.record_node(history, node, 4.0) is True
    assert [entry.node_id for entry in history] == ["d1", "d2", "d1"]


def test_history_keeps_most_recent_entries() -> None:
    history: list[HistoryEntry] = []
    recorder = HistoryRecorder(capacity=3)
    for index in range(5):
        recorder.record_node(history, DialogueNodeDef(id=f"n{index}"), float(index))
    assert [entry.node_id for entry in history] == ["n2", "n3", "n4"]


def test_record_choice_stores_choice_text() -> None:
    history: list[HistoryEntry] = []
    node = ChoiceNodeDef(id="c", text="Which way?", choices=(ChoiceDef(id="left", text="Go left"),))
    HistoryRecorder().record_choice(history, node, node.choices[0], 0.0)
    assert history[0].type == "choice"
    assert history[0].content == "Which way?"
    assert history[0].choice_text == "Go left"


def test_record_image_marks_removals() -> None:
    history: list[HistoryEntry] = []
    recorder = HistoryRecorder()
    shown = ImageNodeDef(id="i1", image=ImageDirectiveDef(resource_path="bg.png", effect="fadeIn", effect_duration=300))
    removed = ImageNodeDef(id="i2", image=ImageDirectiveDef(resource_path="", layer="character"))
    recorder.record_image(history, shown, 0.0)
    recorder.record_image(history, removed, 1.0)
    assert history[0].content == ""
    assert history[0].image is not None and history[0].image.effect_duration == 300
    assert history[1].content == IMAGE_REMOVED_CONTENT
    assert history[1].image is not None and history[1].image.is_removal is True


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        HistoryRecorder(capacity=0)
