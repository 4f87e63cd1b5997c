"""Helpers for resolving project file locations."""
from __future__ import annotations

from pathlib import Path

PROJECT_FILENAME = "project.json"
STAGE_FILENAME = "stage.json"


def get_repo_root() -> Path:
    """Return the repository root."""
    return Path(__file__).resolve().parents[3]


def get_projects_path(base_path: Path | str | None = None) -> Path:
    """Return the directory containing bundled story projects."""
    if base_path is not None:
        return Path(base_path)
    return get_repo_root() / "data" / "projects"


def get_demo_project_path() -> Path:
    """Return the folder of the bundled demo project."""
    return get_projects_path() / "demo"


def stage_file(project_dir: Path, stage_id: str) -> Path:
    return project_dir / stage_id / STAGE_FILENAME


def chapter_file(project_dir: Path, stage_id: str, chapter_id: str) -> Path:
    return project_dir / stage_id / f"{chapter_id}.json"
