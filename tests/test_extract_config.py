#!/usr/bin/env python3
"""Tests for the extract configuration file."""

import json
import sys
from pathlib import Path

import pytest

# Add src to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from secalc.errors import ExtractConfigError
from secalc.game_data.extract_config import ExtractConfig
from secalc.models.entities import Mod


def _write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_full_config(tmp_path):
    path = _write_json(tmp_path / "extract.json", {
        "extract_mods": [[1234567, "Some Mod"]],
        "hide_block_by_exact_name": ["Deco"],
        "hide_block_by_regex_id": ["@1234567$"],
        "rename_block_by_regex": [["^(.+) \\(Left\\)$", "$1"]],
    })
    config = ExtractConfig.load(path)

    assert config.extract_mods == [Mod(1234567, "Some Mod")]
    assert config.hide_block_by_exact_name == ["Deco"]
    assert config.hide_block_by_regex_id == ["@1234567$"]
    assert config.hide_block_by_regex_name == []
    assert config.rename_block_by_regex == [("^(.+) \\(Left\\)$", "$1")]


def test_save_then_load(tmp_path):
    config = ExtractConfig(
        extract_mods=[Mod(1, "A")],
        hide_block_by_regex_subtype_id=["^Test"],
        rename_block_by_regex=[("a", "b")],
    )
    path = tmp_path / "extract.json"
    config.save(path)
    assert ExtractConfig.load(path) == config


def test_repository_example_config_is_valid():
    config = ExtractConfig.load(Path(__file__).parent.parent / "extract_config.json")
    assert config.validate() == []
    assert len(config.extract_mods) > 0


def test_unknown_key_rejected():
    with pytest.raises(ExtractConfigError, match="hide_blocks"):
        ExtractConfig.from_dict({"hide_blocks": []})


def test_non_string_rule_rejected():
    with pytest.raises(ExtractConfigError):
        ExtractConfig.from_dict({"hide_block_by_exact_name": [1, 2]})


def test_malformed_mod_rejected():
    with pytest.raises(ExtractConfigError):
        ExtractConfig.from_dict({"extract_mods": [[1]]})


def test_malformed_rename_rejected():
    # A two character string would otherwise unpack as a pair
    with pytest.raises(ExtractConfigError, match="rename_block_by_regex"):
        ExtractConfig.from_dict({"rename_block_by_regex": ["ab"]})
    with pytest.raises(ExtractConfigError, match="rename_block_by_regex"):
        ExtractConfig.from_dict({"rename_block_by_regex": [[1, 2]]})
    with pytest.raises(ExtractConfigError, match="rename_block_by_regex"):
        ExtractConfig.from_dict({"rename_block_by_regex": [["a", "b", "c"]]})
    with pytest.raises(ExtractConfigError, match="rename_block_by_regex"):
        ExtractConfig.from_dict({"rename_block_by_regex": "^a$"})


def test_mod_id_must_be_an_integer():
    for entry in [[True, "x"], [1.9, "x"], ["1234", "x"], [1234, 5]]:
        with pytest.raises(ExtractConfigError):
            ExtractConfig.from_dict({"extract_mods": [entry]})
    with pytest.raises(ExtractConfigError):
        ExtractConfig.from_dict({"extract_mods": {"1234": "x"}})


def test_invalid_json_rejected(tmp_path):
    path = tmp_path / "extract.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ExtractConfigError):
        ExtractConfig.load(path)


def test_non_utf8_file_rejected(tmp_path):
    path = tmp_path / "extract.json"
    path.write_bytes(b'{"hide_block_by_exact_name": ["\xff\xfe"]}')
    with pytest.raises(ExtractConfigError, match="Failed to read extract config"):
        ExtractConfig.load(path)


def test_validate_reports_problems():
    config = ExtractConfig(
        extract_mods=[Mod(5, "A"), Mod(5, "B"), Mod(0, "C")],
        hide_block_by_regex_name=["(unclosed"],
        rename_block_by_regex=[("^(.+)$", "$2"), ("[bad", "x")],
    )
    problems = config.validate()

    assert any(p.startswith("hide_block_by_regex_name") for p in problems)
    assert any("$2" in p for p in problems)
    assert any("Invalid regex '[bad'" in p for p in problems)
    assert any("duplicate workshop ID 5" in p for p in problems)
    assert any("invalid workshop ID 0" in p for p in problems)


def test_block_rules_compiles_rules():
    config = ExtractConfig(hide_block_by_exact_name=["Deco"], rename_block_by_regex=[("^Prop", "Propeller")])
    rules = config.block_rules()
    assert rules.is_hidden(True, "Deco", "x", "y")
    assert rules.rename("Prop Large") == "Propeller Large"
