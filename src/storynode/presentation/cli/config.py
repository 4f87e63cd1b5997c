"""CLI configuration helpers for options persistence."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict

from storynode.presentation.themes import DEFAULT_THEME_ID, THEMES
from storynode.presentation.typewriter import REVEAL_MODES

logger = logging.getLogger(__name__)

_DEFAULT_TEXT_MODE = "typewriter"


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "StoryNode"
        return Path.home() / "StoryNode"
    return Path.home() / ".config" / "storynode"


def get_default_config_path() -> Path:
    return get_user_data_dir() / "config.json"


def get_save_dir() -> Path:
    """Return the per-user save directory."""
    return get_user_data_dir() / "saves"


def _normalize_text_mode(value: object) -> str:
    return value if isinstance(value, str) and value in REVEAL_MODES else _DEFAULT_TEXT_MODE


def _normalize_theme_id(value: object) -> str:
    return value if isinstance(value, str) and value in THEMES else DEFAULT_THEME_ID


def default_config() -> Dict[str, str]:
    return {"text_display_mode": _DEFAULT_TEXT_MODE, "theme_id": DEFAULT_THEME_ID}


def load_config(path: Path | None = None) -> Dict[str, str]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default_config()
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return default_config()
    if not isinstance(raw, dict):
        return default_config()
    return {
        "text_display_mode": _normalize_text_mode(raw.get("text_display_mode")),
        "theme_id": _normalize_theme_id(raw.get("theme_id")),
    }


def save_config(config: Dict[str, str], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "text_display_mode": _normalize_text_mode(config.get("text_display_mode")),
        "theme_id": _normalize_theme_id(config.get("theme_id")),
    }
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
