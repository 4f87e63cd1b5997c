"""Player themes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

DEFAULT_THEME_ID = "dark"


@dataclass(frozen=True, slots=True)
class Theme:
    id: str
    name: str
    typewriter_speed: int


THEMES: Dict[str, Theme] = {
    "dark": Theme(id="dark", name="Dark", typewriter_speed=30),
    "light": Theme(id="light", name="Light", typewriter_speed=30),
    "retro": Theme(id="retro", name="Retro", typewriter_speed=50),
    "novel": Theme(id="novel", name="Novel", typewriter_speed=40),
    "cyberpunk": Theme(id="cyberpunk", name="Cyberpunk", typewriter_speed=20),
}


def get_theme(theme_id: str | None) -> Theme:
    """Return the theme for ``theme_id``; unknown ids get the dark theme."""
    return THEMES.get(theme_id or DEFAULT_THEME_ID, THEMES[DEFAULT_THEME_ID])
