"""Service-layer exceptions."""
from __future__ import annotations

from dataclasses import dataclass

from storynode.core.types import FailureKind


class ResolutionError(Exception):
    """Raised when a stage, chapter or node id does not resolve."""


class SaveLoadError(Exception):
    """Raised when save data cannot be parsed or validated."""


@dataclass(frozen=True, slots=True)
class EngineFailure:
    """Observable record of a failure the engine absorbed instead of raising."""

    kind: FailureKind
    message: str
