from __future__ import annotations

from storynode.domain.defs import AffectionChange, EffectBundleDef, ReputationChange
from storynode.domain.effects import apply_effects
from storynode.domain.state import GameVariables


def test_apply_effects_floors_gold_and_hp_at_zero() -> None:
    variables = GameVariables(gold=3, hp=20)
    result = apply_effects(variables, EffectBundleDef(gold=-10, hp=-50))
    assert result.gold == 0
    assert result.hp == 0


def test_apply_effects_does_not_mutate_input() -> None:
    variables = GameVariables(gold=1, flags={"a": 1})
    result = apply_effects(variables, EffectBundleDef(gold=4, set_flags={"b": True}))
    assert variables.gold == 1
    assert variables.flags == {"a": 1}
    assert result.gold == 5
    assert result.flags == {"a": 1, "b": True}


def test_apply_effects_accumulates_affection_and_reputation() -> None:
    variables = GameVariables(affection={"mira": 2})
    effects = EffectBundleDef(
        affection=(AffectionChange("mira", 1), AffectionChange("kai", -2)),
        reputation=(ReputationChange("guild", 5), ReputationChange("guild", 1)),
    )
    result = apply_effects(variables, effects)
    assert result.affection == {"mira": 3, "kai": -2}
    assert result.reputation == {"guild": 6}


def test_apply_effects_with_empty_bundle_is_identity() -> None:
    variables = GameVariables(gold=7, hp=9, choices_made=["x"])
    assert apply_effects(variables, EffectBundleDef()) == variables
