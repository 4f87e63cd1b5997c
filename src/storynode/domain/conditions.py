"""Pure condition evaluation against a variable snapshot."""
from __future__ import annotations

from storynode.domain.defs import (
    AffectionCondition,
    ChoiceMadeCondition,
    ConditionDef,
    FlagCondition,
    NumericCondition,
    ReputationCondition,
    UnknownCondition,
)
from storynode.domain.state import GameVariables


def check_number_range(
    value: float,
    min_value: float | None = None,
    max_value: float | None = None,
    exact: float | None = None,
) -> bool:
    """Exact match wins; otherwise both bounds are optional and inclusive."""
    if exact is not None:
        return value == exact
    if min_value is not None and value < min_value:
        return False
    if max_value is not None and value > max_value:
        return False
    return True


def evaluate_condition(variables: GameVariables, condition: ConditionDef) -> bool:
    """Return whether ``condition`` holds for ``variables``. Never raises."""
    if isinstance(condition, NumericCondition):
        current = variables.gold if condition.kind == "gold" else variables.hp
        return check_number_range(current, condition.min, condition.max, condition.value)
    if isinstance(condition, FlagCondition):
        if not condition.flag_key:
            return False
        flag_value = variables.flags.get(condition.flag_key)
        if condition.flag_value is not None:
            return _scalar_equals(flag_value, condition.flag_value)
        return bool(flag_value)
    if isinstance(condition, ChoiceMadeCondition):
        if not condition.choice_id:
            return False
        return condition.choice_id in variables.choices_made
    if isinstance(condition, AffectionCondition):
        if not condition.character_id:
            return False
        current = variables.affection.get(condition.character_id, 0)
        return check_number_range(current, condition.min, condition.max, condition.value)
    if isinstance(condition, ReputationCondition):
        if not condition.faction_id:
            return False
        current = variables.reputation.get(condition.faction_id, 0)
        return check_number_range(current, condition.min, condition.max, condition.value)
    if isinstance(condition, UnknownCondition):
        return True
    raise TypeError(f"Unsupported condition: {condition!r}")


def _scalar_equals(left: object, right: object) -> bool:
    # Strict equality: True must not match 1, "1" must not match 1.
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    return type(left) is type(right) and left == right
