"""Domain definition exports."""

from .story_def import (
    TRANSPARENT_NODE_TYPES,
    AffectionChange,
    AffectionCondition,
    ChapterDef,
    ChapterEndNodeDef,
    ChoiceDef,
    ChoiceMadeCondition,
    ChoiceNodeDef,
    ConditionBranchDef,
    ConditionDef,
    ConditionNodeDef,
    CustomNodeDef,
    DialogueNodeDef,
    EffectBundleDef,
    FlagCondition,
    GameSettingsDef,
    ImageDirectiveDef,
    ImageNodeDef,
    NumericCondition,
    ProjectVariablesDef,
    ReputationChange,
    ReputationCondition,
    ResourceDef,
    StageDef,
    StartNodeDef,
    StoryNodeDef,
    StoryProject,
    UnknownCondition,
    VariableNodeDef,
    VariableOperationDef,
)

__all__ = [
    "TRANSPARENT_NODE_TYPES",
    "AffectionChange",
    "AffectionCondition",
    "ChapterDef",
    "ChapterEndNodeDef",
    "ChoiceDef",
    "ChoiceMadeCondition",
    "ChoiceNodeDef",
    "ConditionBranchDef",
    "ConditionDef",
    "ConditionNodeDef",
    "CustomNodeDef",
    "DialogueNodeDef",
    "EffectBundleDef",
    "FlagCondition",
    "GameSettingsDef",
    "ImageDirectiveDef",
    "ImageNodeDef",
    "NumericCondition",
    "ProjectVariablesDef",
    "ReputationChange",
    "ReputationCondition",
    "ResourceDef",
    "StageDef",
    "StartNodeDef",
    "StoryNodeDef",
    "StoryProject",
    "UnknownCondition",
    "VariableNodeDef",
    "VariableOperationDef",
]
