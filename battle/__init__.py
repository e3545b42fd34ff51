"""Battle thread sessions, rules and registry."""

from .armies import ArmiesConfiguration, SetupParseError, parse_setup_command
from .registry import BattleRegistry
from .rules import BattleRules, RulesError, load_rules
from .session import (
    CUSTOM_ID_NAMESPACE,
    BattleSession,
    Participant,
    SessionState,
    build_battle_controls,
)

__all__ = [
    "ArmiesConfiguration",
    "BattleRegistry",
    "BattleRules",
    "BattleSession",
    "CUSTOM_ID_NAMESPACE",
    "Participant",
    "RulesError",
    "SessionState",
    "SetupParseError",
    "build_battle_controls",
    "load_rules",
    "parse_setup_command",
]
