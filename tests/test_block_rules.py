#!/usr/bin/env python3
"""Tests for block hide and rename rules."""

import sys
from pathlib import Path

import pytest

# Add src to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from secalc.errors import ExtractConfigError
from secalc.game_data.block_rules import BlockRules, RenameRule, parse_replacement


def test_parse_replacement_forms():
    assert parse_replacement("plain") == ["plain"]
    assert parse_replacement("$1 x") == [(1,), " x"]
    assert parse_replacement("${size} Prop") == [("size",), " Prop"]
    assert parse_replacement("cost $$5") == ["cost $5"]
    # A lone $ stays literal
    assert parse_replacement("a $ b") == ["a $ b"]


def test_non_ascii_digits_are_group_names():
    assert parse_replacement("${١}") == [("١",)]
    rule = RenameRule("^(a)$", "${١}")
    assert rule.missing_references() == ["${١}"]
    assert rule.apply("a") == ""


def test_rename_with_numbered_and_named_groups():
    rule = RenameRule(r"^(?P<name>.+) \((Left|Right)\)$", "${name} [$2]")
    assert rule.apply("Industrial Thruster (Left)") == "Industrial Thruster [Left]"


def test_rename_replaces_all_matches():
    rule = RenameRule("Thrust", "Engine")
    assert rule.apply("Thrust Thrust") == "Engine Engine"


def test_rename_unmatched_group_expands_to_empty():
    rule = RenameRule(r"^(Small)?(Large)? Block$", "[$1$2$7]")
    assert rule.apply("Large Block") == "[Large]"


def test_rename_reports_missing_references():
    assert RenameRule(r"^(.+)$", "$1 $2 ${nope}").missing_references() == ["$2", "${nope}"]
    assert RenameRule(r"^(.+)$", "$1").missing_references() == []


def test_first_matching_rename_wins():
    rules = BlockRules(rename_block_by_regex=[
        ("^Prop (.+)$", "$1 Propeller"),
        ("^Prop", "Never"),
    ])
    assert rules.rename("Prop Large") == "Large Propeller"
    assert rules.rename("Ion Thruster") is None


def test_non_public_blocks_are_always_hidden():
    rules = BlockRules()
    assert rules.is_hidden(False, "Battery", "LargeBlockBatteryBlock", "BatteryBlock.LargeBlockBatteryBlock")
    assert not rules.is_hidden(True, "Battery", "LargeBlockBatteryBlock", "BatteryBlock.LargeBlockBatteryBlock")


def test_hide_by_exact_and_regex():
    rules = BlockRules(
        hide_block_by_exact_name=["Deco Thruster"],
        hide_block_by_regex_name=["Right"],
        hide_block_by_exact_subtype_id=["LargeTest"],
        hide_block_by_regex_subtype_id=["^Debug"],
        hide_block_by_exact_id=["Thrust.Foo@42"],
        hide_block_by_regex_id=[r"@99$"],
    )
    assert rules.is_hidden(True, "Deco Thruster", "A", "Thrust.A")
    # Regexes match anywhere in the text
    assert rules.is_hidden(True, "Thruster (Right)", "B", "Thrust.B")
    assert rules.is_hidden(True, "Thruster", "LargeTest", "Thrust.LargeTest")
    assert rules.is_hidden(True, "Thruster", "DebugBlock", "Thrust.DebugBlock")
    assert rules.is_hidden(True, "Thruster", "Foo", "Thrust.Foo@42")
    assert rules.is_hidden(True, "Thruster", "Bar", "Thrust.Bar@99")
    # Exact rules are not substring matches
    assert not rules.is_hidden(True, "Deco Thruster Mk2", "Foo", "Thrust.Foo")


def test_invalid_regex_raises():
    with pytest.raises(ExtractConfigError):
        BlockRules(hide_block_by_regex_name=["(unclosed"])
    with pytest.raises(ExtractConfigError):
        RenameRule("[bad", "x")
