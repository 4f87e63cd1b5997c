"""Service layer exports."""

from .errors import EngineFailure, ResolutionError, SaveLoadError
from .game_engine import GameEngine
from .history import HISTORY_CAPACITY, IMAGE_REMOVED_CONTENT, HistoryRecorder
from .image_layers import ImageLayerManager
from .save_service import SaveService
from .story_validator import Issue, format_issue, validate_chapter, validate_project

__all__ = [
    "EngineFailure",
    "ResolutionError",
    "SaveLoadError",
    "GameEngine",
    "HISTORY_CAPACITY",
    "IMAGE_REMOVED_CONTENT",
    "HistoryRecorder",
    "ImageLayerManager",
    "SaveService",
    "Issue",
    "format_issue",
    "validate_chapter",
    "validate_project",
]
