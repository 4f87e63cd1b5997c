"""Typed arithmetic/assignment operations on named variable slots."""
from __future__ import annotations

from storynode.domain.defs import VariableOperationDef
from storynode.domain.state import GameVariables


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def apply_action(current: float, action: str, value: float) -> float:
    """Apply ``action`` to ``current``; unknown actions keep the current value."""
    if action == "set":
        return value
    if action == "add":
        return current + value
    if action == "subtract":
        return current - value
    if action == "multiply":
        return current * value
    return current


def execute_variable_operation(variables: GameVariables, operation: VariableOperationDef) -> GameVariables:
    """Return a new snapshot with ``operation`` applied."""
    result = variables.copy()
    numeric_value = operation.value if is_number(operation.value) else 0
    target = operation.target

    if target == "gold":
        result.gold = _floored_int(apply_action(result.gold, operation.action, numeric_value))
    elif target == "hp":
        result.hp = _floored_int(apply_action(result.hp, operation.action, numeric_value))
    elif target == "flag":
        if operation.key:
            if operation.action == "set":
                result.flags[operation.key] = operation.value
            else:
                current = result.flags.get(operation.key)
                if is_number(current):
                    result.flags[operation.key] = apply_action(current, operation.action, numeric_value)
    elif target == "affection":
        if operation.character_id:
            current = result.affection.get(operation.character_id, 0)
            result.affection[operation.character_id] = apply_action(current, operation.action, numeric_value)
    elif target == "reputation":
        if operation.faction_id:
            current = result.reputation.get(operation.faction_id, 0)
            result.reputation[operation.faction_id] = apply_action(current, operation.action, numeric_value)
    return result


def execute_variable_operations(
    variables: GameVariables, operations: tuple[VariableOperationDef, ...] | list[VariableOperationDef]
) -> GameVariables:
    """Apply ``operations`` in declaration order."""
    result = variables
    for operation in operations:
        result = execute_variable_operation(result, operation)
    return result if result is not variables else variables.copy()


def _floored_int(value: float) -> int:
    return max(0, int(value))
