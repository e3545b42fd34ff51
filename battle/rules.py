"""Numeric rules battles roll against."""

from __future__ import annotations

import random
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping

import yaml

__all__ = ["BattleRules", "RulesError", "load_rules"]


class RulesError(RuntimeError):
    """Raised when battle rules could not be loaded from disk."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        if path is not None:
            message = f"{message} (source: {path})"
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class BattleRules:
    """Health limits and the inclusive ranges for damage and heal rolls."""

    starting_hp: int = 100
    max_hp: int = 100
    damage_min: int = 5
    damage_max: int = 19
    heal_min: int = 3
    heal_max: int = 10

    def __post_init__(self) -> None:
        for field_info in fields(self):
            value = getattr(self, field_info.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise RulesError(f"{field_info.name} must be an integer")
            if value < 0:
                raise RulesError(f"{field_info.name} must not be negative")
        if self.max_hp <= 0:
            raise RulesError("max_hp must be positive")
        if not 1 <= self.starting_hp <= self.max_hp:
            raise RulesError("starting_hp must be between 1 and max_hp")
        if self.damage_min > self.damage_max:
            raise RulesError("damage_min must not exceed damage_max")
        if self.heal_min > self.heal_max:
            raise RulesError("heal_min must not exceed heal_max")

    def roll_damage(self, rng: random.Random | None = None) -> int:
        generator = rng or random
        return generator.randint(self.damage_min, self.damage_max)

    def roll_heal(self, rng: random.Random | None = None) -> int:
        generator = rng or random
        return generator.randint(self.heal_min, self.heal_max)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> "BattleRules":
        known = {field_info.name for field_info in fields(cls)}
        unknown = sorted(str(key) for key in payload if key not in known)
        if unknown:
            raise RulesError(f"Unknown rule keys: {', '.join(unknown)}")
        return cls(**{str(key): value for key, value in payload.items()})  # type: ignore[arg-type]


def load_rules(path: Path) -> BattleRules:
    """Load rules from a YAML file, returning the defaults when it is absent."""

    if not path.exists():
        return BattleRules()
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise RulesError(f"Invalid YAML: {exc}", path=path) from exc
    if raw is None:
        return BattleRules()
    if not isinstance(raw, Mapping):
        raise RulesError("Battle rules must be a mapping", path=path)
    try:
        return BattleRules.from_mapping(raw)
    except RulesError as exc:
        raise RulesError(str(exc), path=path) from exc
