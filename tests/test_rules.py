"""Coverage for battle rule rolls and YAML loading."""

from __future__ import annotations

import random
from pathlib import Path

import pytest

from battle.rules import BattleRules, RulesError, load_rules


def test_default_rolls_cover_inclusive_ranges() -> None:
    rules = BattleRules()
    rng = random.Random(7)
    damage = {rules.roll_damage(rng) for _ in range(2000)}
    heals = {rules.roll_heal(rng) for _ in range(2000)}
    assert damage == set(range(5, 20))
    assert heals == set(range(3, 11))


def test_load_rules_missing_file_returns_defaults(tmp_path: Path) -> None:
    assert load_rules(tmp_path / "missing.yaml") == BattleRules()


def test_load_rules_reads_overrides(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("damage_min: 1\ndamage_max: 2\nheal_max: 4\n", encoding="utf-8")

    rules = load_rules(path)

    assert rules.damage_min == 1
    assert rules.damage_max == 2
    assert rules.heal_min == 3
    assert rules.heal_max == 4
    assert rules.starting_hp == 100


def test_bundled_rules_match_defaults() -> None:
    path = Path(__file__).resolve().parents[1] / "data" / "battle_rules.yaml"
    assert load_rules(path) == BattleRules()


@pytest.mark.parametrize(
    "text",
    [
        "damage_min: 20\ndamage_max: 10\n",
        "heal_min: -1\n",
        "starting_hp: 150\n",
        "critical_chance: 5\n",
        "max_hp: ten\n",
        "- 1\n- 2\n",
        "damage_min: [\n",
    ],
)
def test_load_rules_rejects_invalid_files(tmp_path: Path, text: str) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(RulesError) as excinfo:
        load_rules(path)

    assert excinfo.value.path == path
