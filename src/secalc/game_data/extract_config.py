"""Extraction configuration: which mods to extract and how to hide and rename blocks."""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Tuple

from ..errors import ExtractConfigError
from ..models.entities import Mod
from .block_rules import BlockRules, RenameRule, compile_pattern

logger = logging.getLogger("secalc.game_data")


def _is_string_pair(value) -> bool:
    return isinstance(value, list) and len(value) == 2 and all(isinstance(v, str) for v in value)


@dataclass
class ExtractConfig:
    """
    Rules for a game data extraction run.

    Stored as JSON. Mods are [workshop_id, name] pairs and renames are
    [pattern, replacement] pairs, where the replacement may reference capture
    groups with $N or ${name}.
    """
    extract_mods: List[Mod] = field(default_factory=list)

    hide_block_by_exact_name: List[str] = field(default_factory=list)
    hide_block_by_regex_name: List[str] = field(default_factory=list)
    hide_block_by_exact_subtype_id: List[str] = field(default_factory=list)
    hide_block_by_regex_subtype_id: List[str] = field(default_factory=list)
    hide_block_by_exact_id: List[str] = field(default_factory=list)
    hide_block_by_regex_id: List[str] = field(default_factory=list)
    rename_block_by_regex: List[Tuple[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ExtractConfig":
        if not isinstance(data, dict):
            raise ExtractConfigError("Extract config must be a JSON object")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ExtractConfigError(f"Unknown extract config keys: {', '.join(sorted(unknown))}")

        mod_entries = data.get("extract_mods", [])
        if not isinstance(mod_entries, list):
            raise ExtractConfigError("'extract_mods' must be a list of [workshop_id, name] pairs")
        try:
            mods = [Mod.from_json(m) for m in mod_entries]
        except (TypeError, ValueError) as e:
            raise ExtractConfigError(f"Malformed extract config: {e}") from e

        rename_entries = data.get("rename_block_by_regex", [])
        if not isinstance(rename_entries, list) or not all(_is_string_pair(r) for r in rename_entries):
            raise ExtractConfigError("'rename_block_by_regex' must be a list of [pattern, replacement] string pairs")
        renames = [(p, r) for p, r in rename_entries]

        config = cls(extract_mods=mods, rename_block_by_regex=renames)
        for name in known - {"extract_mods", "rename_block_by_regex"}:
            values = data.get(name, [])
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise ExtractConfigError(f"'{name}' must be a list of strings")
            setattr(config, name, list(values))
        return config

    def to_dict(self) -> dict:
        return {
            "extract_mods": [m.to_json() for m in self.extract_mods],
            "hide_block_by_exact_name": self.hide_block_by_exact_name,
            "hide_block_by_regex_name": self.hide_block_by_regex_name,
            "hide_block_by_exact_subtype_id": self.hide_block_by_exact_subtype_id,
            "hide_block_by_regex_subtype_id": self.hide_block_by_regex_subtype_id,
            "hide_block_by_exact_id": self.hide_block_by_exact_id,
            "hide_block_by_regex_id": self.hide_block_by_regex_id,
            "rename_block_by_regex": [list(r) for r in self.rename_block_by_regex],
        }

    @classmethod
    def load(cls, path: Path) -> "ExtractConfig":
        """Load an extract config from a JSON file."""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as e:
            # Malformed JSON or text that is not UTF-8
            raise ExtractConfigError(f"Failed to read extract config '{path}': {e}") from e

        config = cls.from_dict(data)
        logger.info(f"Loaded extract config from {path} ({len(config.extract_mods)} mods)")
        return config

    def save(self, path: Path):
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    def block_rules(self) -> BlockRules:
        """Compile the hide and rename rules."""
        return BlockRules.from_config(self)

    def validate(self) -> List[str]:
        """Check the config for problems, returning one message per problem."""
        problems = []

        for name in ("hide_block_by_regex_name", "hide_block_by_regex_subtype_id", "hide_block_by_regex_id"):
            for pattern in getattr(self, name):
                try:
                    compile_pattern(pattern)
                except ExtractConfigError as e:
                    problems.append(f"{name}: {e}")

        for pattern, replacement in self.rename_block_by_regex:
            try:
                rule = RenameRule(pattern, replacement)
            except ExtractConfigError as e:
                problems.append(f"rename_block_by_regex: {e}")
                continue
            missing = rule.missing_references()
            if missing:
                problems.append(
                    f"rename_block_by_regex: replacement '{replacement}' references "
                    f"{', '.join(missing)} not defined by '{pattern}'"
                )

        seen = set()
        for mod in self.extract_mods:
            if mod.id <= 0:
                problems.append(f"extract_mods: invalid workshop ID {mod.id} for '{mod.name}'")
            if mod.id in seen:
                problems.append(f"extract_mods: duplicate workshop ID {mod.id}")
            seen.add(mod.id)

        return problems
