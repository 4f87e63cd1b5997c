from __future__ import annotations

import pytest

from storynode.domain.defs import ChoiceDef
from storynode.domain.state import ActiveImage, GameVariables
from storynode.presentation.cli import render


def test_debug_enabled_requires_exact_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORYNODE_DEBUG", "1")
    assert render.debug_enabled() is True
    monkeypatch.setenv("STORYNODE_DEBUG", "true")
    assert render.debug_enabled() is False


def test_render_images_orders_background_first(capsys: pytest.CaptureFixture[str]) -> None:
    render.render_images(
        [
            ActiveImage(id="c", instance_id=2, resource_path="hero.png", layer="character", layer_order=1),
            ActiveImage(id="b", instance_id=1, resource_path="bg.png", layer="background"),
        ]
    )
    assert capsys.readouterr().out.splitlines() == ["[background:0] bg.png", "[character:1] hero.png"]


def test_locked_choices_are_marked() -> None:
    choice = ChoiceDef(id="climb", text="Climb")
    assert render.format_choice(1, choice, True) == "1. Climb"
    assert render.format_choice(1, choice, False) == f"1. Climb {render.DISABLED_CHOICE_MARK}"


def test_speaker_line_shows_node_id_in_debug(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("STORYNODE_DEBUG", "1")
    render.render_speaker("Mira", "n1")
    assert capsys.readouterr().out.splitlines() == ["[n1]", "Mira:"]


def test_wrap_text_for_box_breaks_on_words() -> None:
    lines = render.wrap_text_for_box("the quick brown fox jumps", 10)
    assert all(len(line) <= 10 for line in lines)
    assert lines[0] == "the quick"
    assert render.wrap_text_for_box("", 10) == [""]


def test_format_variables() -> None:
    assert render.format_variables(GameVariables(gold=3, hp=40)) == "Gold: 3  HP: 40"
