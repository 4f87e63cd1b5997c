"""Repository that assembles a StoryProject from disk."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from storynode.data import paths
from storynode.data.errors import DataValidationError
from storynode.data.json_loader import load_json
from storynode.data.repositories.base import RepositoryBase
from storynode.data.repositories.story_parser import StoryDocumentParser
from storynode.domain.defs import StoryProject

logger = logging.getLogger(__name__)


class ProjectRepository(RepositoryBase[StoryProject]):
    """Loads a project from a single JSON file or from the editor's folder layout.

    Folder layout::

        project.json              {"name", "version", "stages": ["stage_1", ...], ...}
        stage_1/stage.json        {"id", "title", "chapters": ["chapter_1", ...], ...}
        stage_1/chapter_1.json    {"id", "title", "startNodeId", "nodes": [...]}

    Stage and chapter entries may also be inlined as objects instead of ids.
    """

    def __init__(self, base_path: Path | str | None = None) -> None:
        super().__init__(base_path if base_path is not None else paths.get_demo_project_path())
        self._parser = StoryDocumentParser()

    def _load_raw(self) -> dict[str, object]:
        if self._base_path.is_dir():
            return self._assemble_folder(self._base_path)
        raw = load_json(self._base_path)
        return self._require_mapping(raw, f"top-level object in {self._base_path}")

    def _build(self, raw: dict[str, object]) -> StoryProject:
        project = self._parser.parse_project(raw)
        logger.info(
            "Loaded project '%s' (%d stages) from %s", project.name, len(project.stages), self._base_path
        )
        return project

    def _assemble_folder(self, project_dir: Path) -> dict[str, object]:
        project_path = project_dir / paths.PROJECT_FILENAME
        project_raw = dict(self._require_mapping(load_json(project_path), f"top-level object in {project_path}"))
        stages: List[object] = []
        for index, entry in enumerate(self._require_list(project_raw.get("stages"), "project stages")):
            if isinstance(entry, dict):
                stages.append(entry)
                continue
            stage_id = self._require_str(entry, f"project stages[{index}]")
            stages.append(self._assemble_stage(project_dir, stage_id))
        project_raw["stages"] = stages
        return project_raw

    def _assemble_stage(self, project_dir: Path, stage_id: str) -> dict[str, object]:
        stage_path = paths.stage_file(project_dir, stage_id)
        stage_raw = dict(self._require_mapping(load_json(stage_path), f"top-level object in {stage_path}"))
        stage_raw.setdefault("id", stage_id)
        if stage_raw["id"] != stage_id:
            raise DataValidationError(f"{stage_path} declares id '{stage_raw['id']}', expected '{stage_id}'.")
        chapters: List[object] = []
        for index, entry in enumerate(self._require_list(stage_raw.get("chapters"), f"stage '{stage_id}' chapters")):
            if isinstance(entry, dict):
                chapters.append(entry)
                continue
            chapter_id = self._require_str(entry, f"stage '{stage_id}' chapters[{index}]")
            chapter_path = paths.chapter_file(project_dir, stage_id, chapter_id)
            chapter_raw = dict(self._require_mapping(load_json(chapter_path), f"top-level object in {chapter_path}"))
            chapter_raw.setdefault("id", chapter_id)
            chapters.append(chapter_raw)
        stage_raw["chapters"] = chapters
        return stage_raw
