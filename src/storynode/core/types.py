"""Shared type aliases for the core and domain layers."""
from typing import Literal

NodeType = Literal["start", "dialogue", "choice", "condition", "variable", "image", "chapter_end"]
ConditionKind = Literal["gold", "hp", "flag", "choice_made", "affection", "reputation"]
VariableTarget = Literal["gold", "hp", "flag", "affection", "reputation"]
VariableAction = Literal["set", "add", "subtract", "multiply"]
ImageLayer = Literal["background", "character"]
Alignment = Literal["left", "center", "right"]
RevealMode = Literal["typewriter", "instant", "fade"]
EngineStatus = Literal["uninitialized", "running", "awaiting_choice", "ended"]
FailureKind = Literal["resolution", "malformed_save"]

Scalar = int | float | str | bool

__all__ = [
    "Alignment",
    "ConditionKind",
    "EngineStatus",
    "FailureKind",
    "ImageLayer",
    "NodeType",
    "RevealMode",
    "Scalar",
    "VariableAction",
    "VariableTarget",
]
