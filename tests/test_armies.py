"""Unit coverage for the armies setup command parser."""

from __future__ import annotations

import pytest

from battle.armies import (
    ArmiesConfiguration,
    SetupParseError,
    is_setup_command,
    parse_setup_command,
)


def test_parse_setup_command_reads_both_sides() -> None:
    armies = parse_setup_command("setup attacker: 3,1,0,0 ; defender: 2,2,0,0")
    assert armies == ArmiesConfiguration(attacker=(3, 1, 0, 0), defender=(2, 2, 0, 0))
    assert armies.describe() == "Attacker: 3, 1, 0, 0; Defender: 2, 2, 0, 0"


def test_parse_setup_command_is_case_insensitive_and_order_free() -> None:
    armies = parse_setup_command("  SETUP Defender:1, 2 ,3,4;ATTACKER : 0,0,0,12  ")
    assert armies.attacker == (0, 0, 0, 12)
    assert armies.defender == (1, 2, 3, 4)


@pytest.mark.parametrize(
    "content",
    [
        "setup attacker 3,1,0,0 ; defender: 2,2,0,0",
        "setup attacker: 3,1,x,0 ; defender: 2,2,0,0",
        "setup attacker: 3,1,-1,0 ; defender: 2,2,0,0",
        "setup attacker: 3,1,0 ; defender: 2,2,0,0",
        "setup attacker: 3,1,0,0,5 ; defender: 2,2,0,0",
        "setup attacker: 3,1,0,0",
        "setup attacker: 3,1,0,0 ; defender: 2,2.5,0,0",
        "setup attacker: 3,1,,0 ; defender: 2,2,0,0",
        "setup",
    ],
)
def test_parse_setup_command_rejects_malformed_input(content: str) -> None:
    with pytest.raises(SetupParseError):
        parse_setup_command(content)


def test_is_setup_command_requires_leading_token() -> None:
    assert is_setup_command("setup attacker: 1,1,1,1 ; defender: 1,1,1,1")
    assert is_setup_command("Setup")
    assert not is_setup_command("please setup the armies")
    assert not is_setup_command("setupattacker: 1,1,1,1")
    assert not is_setup_command("")
