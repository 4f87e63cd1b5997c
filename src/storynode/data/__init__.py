"""Data layer utilities for loading story projects."""

from .errors import DataError, DataLoadError, DataValidationError
from .paths import get_demo_project_path, get_projects_path, get_repo_root
from .repositories import ProjectRepository, parse_project

__all__ = [
    "DataError",
    "DataLoadError",
    "DataValidationError",
    "ProjectRepository",
    "get_demo_project_path",
    "get_projects_path",
    "get_repo_root",
    "parse_project",
]
