"""Shared CLI rendering helpers."""
from __future__ import annotations

import os
import textwrap
from typing import Sequence

from storynode.domain.defs import ChoiceDef
from storynode.domain.state import ActiveImage, GameVariables

DISABLED_CHOICE_MARK = "(locked)"


def debug_enabled() -> bool:
    """Return True only when STORYNODE_DEBUG is explicitly set to '1'."""
    return os.getenv("STORYNODE_DEBUG") == "1"


def wrap_text_for_box(text: str, width: int, *, indent_continuation: bool = True) -> list[str]:
    """Wrap text to ``width`` on word boundaries; continuation lines get two spaces."""
    if not text or width <= 0:
        return [text] if text else [""]
    wrapped = textwrap.fill(
        text,
        width=width,
        subsequent_indent="  " if indent_continuation else "",
        break_long_words=False,
        break_on_hyphens=False,
    )
    return wrapped.split("\n")


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def format_image(image: ActiveImage) -> str:
    return f"[{image.layer}:{image.layer_order}] {image.resource_path}"


def render_images(images: Sequence[ActiveImage]) -> None:
    """List on-screen images ordered by layer then layer order."""
    if not images:
        return
    for image in sorted(images, key=lambda item: (item.layer != "background", item.layer_order)):
        print(format_image(image))


def render_speaker(speaker: str | None, node_id: str) -> None:
    if debug_enabled():
        print(f"[{node_id}]")
    if speaker:
        print(f"{speaker}:")


def format_choice(index: int, choice: ChoiceDef, enabled: bool) -> str:
    suffix = "" if enabled else f" {DISABLED_CHOICE_MARK}"
    return f"{index}. {choice.text}{suffix}"


def render_choices(choices: Sequence[tuple[ChoiceDef, bool]]) -> None:
    """Display numbered story choices, marking the ones whose guard fails."""
    if not choices:
        return
    render_heading("Choices")
    for idx, (choice, enabled) in enumerate(choices, start=1):
        print(format_choice(idx, choice, enabled))


def format_variables(variables: GameVariables) -> str:
    return f"Gold: {variables.gold}  HP: {variables.hp}"

