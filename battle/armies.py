"""Army unit counts and the admin setup command that configures them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

__all__ = [
    "SETUP_EXAMPLE",
    "SETUP_FORMAT",
    "UNIT_TIERS",
    "ArmiesConfiguration",
    "SetupParseError",
    "is_setup_command",
    "parse_setup_command",
]

UNIT_TIERS = 4
SETUP_FORMAT = "setup attacker: t1,t2,t3,t4 ; defender: t1,t2,t3,t4"
SETUP_EXAMPLE = "setup attacker: 3,1,0,0 ; defender: 2,2,0,0"

_COUNT_PATTERN = re.compile(r"\d+", re.ASCII)


class SetupParseError(ValueError):
    """Raised when a setup command does not follow the expected format."""


@dataclass(frozen=True)
class ArmiesConfiguration:
    """Unit counts per tier for both sides of a battle."""

    attacker: Tuple[int, ...]
    defender: Tuple[int, ...]

    def __post_init__(self) -> None:
        for side, counts in (("attacker", self.attacker), ("defender", self.defender)):
            if len(counts) != UNIT_TIERS:
                raise SetupParseError(f"{side} needs exactly {UNIT_TIERS} unit counts")
            if any(count < 0 for count in counts):
                raise SetupParseError(f"{side} unit counts must not be negative")

    def describe(self) -> str:
        attacker = ", ".join(str(count) for count in self.attacker)
        defender = ", ".join(str(count) for count in self.defender)
        return f"Attacker: {attacker}; Defender: {defender}"


def is_setup_command(content: str) -> bool:
    """Return ``True`` when the first token of ``content`` is ``setup``."""

    tokens = content.split(maxsplit=1)
    return bool(tokens) and tokens[0].casefold() == "setup"


def _find_clause(clauses: Sequence[str], side: str) -> Optional[str]:
    for clause in clauses:
        if clause.casefold().startswith(side):
            return clause
    return None


def _parse_counts(clause: str, side: str) -> Tuple[int, ...]:
    _, colon, remainder = clause.partition(":")
    if not colon:
        raise SetupParseError(f"{side} clause is missing a ':'")
    counts = []
    for raw in remainder.split(","):
        value = raw.strip()
        if not _COUNT_PATTERN.fullmatch(value):
            raise SetupParseError(f"{side} count {value!r} is not a non-negative integer")
        counts.append(int(value))
    if len(counts) != UNIT_TIERS:
        raise SetupParseError(f"{side} needs exactly {UNIT_TIERS} unit counts")
    return tuple(counts)


def parse_setup_command(content: str) -> ArmiesConfiguration:
    """Parse ``setup attacker: a,b,c,d ; defender: e,f,g,h``."""

    stripped = content.strip()
    if not is_setup_command(stripped):
        raise SetupParseError("Setup commands must start with 'setup'")
    remainder = stripped[len("setup"):]
    clauses = [clause.strip() for clause in remainder.split(";")]
    attacker_clause = _find_clause(clauses, "attacker")
    defender_clause = _find_clause(clauses, "defender")
    if attacker_clause is None or defender_clause is None:
        raise SetupParseError("Both an attacker and a defender clause are required")
    return ArmiesConfiguration(
        attacker=_parse_counts(attacker_clause, "attacker"),
        defender=_parse_counts(defender_clause, "defender"),
    )
