"""Repository exports."""

from .project_repo import ProjectRepository
from .story_parser import StoryDocumentParser, parse_project

__all__ = [
    "ProjectRepository",
    "StoryDocumentParser",
    "parse_project",
]
