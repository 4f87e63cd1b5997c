from pathlib import Path

from storynode.data import paths


def test_get_projects_path_base_path(tmp_path: Path) -> None:
    assert paths.get_projects_path(tmp_path) == tmp_path


def test_demo_project_is_bundled() -> None:
    demo = paths.get_demo_project_path()
    assert (demo / paths.PROJECT_FILENAME).exists()
    assert paths.stage_file(demo, "stage_1").exists()
    assert paths.chapter_file(demo, "stage_1", "chapter_1").exists()
