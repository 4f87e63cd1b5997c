"""Pure helpers for applying effect bundles to game variables."""
from __future__ import annotations

from storynode.domain.defs import EffectBundleDef
from storynode.domain.state import GameVariables


def apply_effects(variables: GameVariables, effects: EffectBundleDef) -> GameVariables:
    """Return a new snapshot with ``effects`` applied; ``variables`` is left untouched."""

    result = variables.copy()

    if effects.gold is not None:
        result.gold = max(0, result.gold + effects.gold)

    if effects.hp is not None:
        result.hp = max(0, result.hp + effects.hp)

    if effects.set_flags:
        result.flags.update(effects.set_flags)

    for change in effects.affection:
        result.affection[change.character_id] = result.affection.get(change.character_id, 0) + change.delta

    for change in effects.reputation:
        result.reputation[change.faction_id] = result.reputation.get(change.faction_id, 0) + change.delta

    return result
