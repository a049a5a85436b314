"""Hide and rename rules applied to block definitions during extraction."""

import logging
import re
from typing import Iterable, List, Optional, Pattern, Tuple, Union

from ..errors import ExtractConfigError

logger = logging.getLogger("secalc.game_data")

# A parsed replacement template: literal text, or a group reference (int index or str name)
TemplatePart = Union[str, Tuple[Union[int, str]]]

_NAME_CHARS = re.compile(r"[_0-9A-Za-z]+")
_GROUP_NUMBER = re.compile(r"[0-9]+")


def parse_replacement(template: str) -> List[TemplatePart]:
    """
    Parse a replacement template with $-style group references.

    Supported forms are $N, ${N}, $name, ${name} and $$ for a literal dollar
    sign. A $ that starts none of these is kept literally.
    """
    parts: List[TemplatePart] = []
    literal: List[str] = []
    i = 0
    while i < len(template):
        char = template[i]
        if char != "$":
            literal.append(char)
            i += 1
            continue

        ref: Optional[str] = None
        if template.startswith("$$", i):
            literal.append("$")
            i += 2
            continue
        if template.startswith("${", i):
            end = template.find("}", i + 2)
            if end > i + 2:
                ref = template[i + 2:end]
                i = end + 1
        else:
            match = _NAME_CHARS.match(template, i + 1)
            if match:
                ref = match.group(0)
                i = match.end()

        if ref is None:
            literal.append("$")
            i += 1
            continue

        if literal:
            parts.append("".join(literal))
            literal = []
        parts.append((int(ref),) if _GROUP_NUMBER.fullmatch(ref) else (ref,))

    if literal:
        parts.append("".join(literal))
    return parts


def template_references(parts: List[TemplatePart]) -> List[Union[int, str]]:
    return [part[0] for part in parts if isinstance(part, tuple)]


def missing_references(pattern: Pattern, parts: List[TemplatePart]) -> List[str]:
    """Group references in a template that the pattern does not define."""
    missing = []
    for ref in template_references(parts):
        if isinstance(ref, int):
            if ref > pattern.groups:
                missing.append(f"${ref}")
        elif ref not in pattern.groupindex:
            missing.append(f"${{{ref}}}")
    return missing


def expand_replacement(match: re.Match, parts: List[TemplatePart]) -> str:
    """Expand a parsed template for a match. Unmatched or unknown groups expand to ''."""
    out = []
    for part in parts:
        if isinstance(part, str):
            out.append(part)
            continue
        ref = part[0]
        try:
            value = match.group(ref)
        except IndexError:
            value = None
        out.append(value or "")
    return "".join(out)


def compile_pattern(pattern: str) -> Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ExtractConfigError(f"Invalid regex '{pattern}': {e}") from e


class RenameRule:
    """A regex pattern with a $-style replacement template."""

    def __init__(self, pattern: str, replacement: str):
        self.pattern = compile_pattern(pattern)
        self.replacement = replacement
        self._parts = parse_replacement(replacement)

    def matches(self, name: str) -> bool:
        return self.pattern.search(name) is not None

    def apply(self, name: str) -> str:
        """Replace all non-overlapping matches in name."""
        return self.pattern.sub(lambda m: expand_replacement(m, self._parts), name)

    def missing_references(self) -> List[str]:
        return missing_references(self.pattern, self._parts)


class HideRule:
    """Exact values plus regex patterns; a text is hidden when it matches either."""

    def __init__(self, exact: Iterable[str], regexes: Iterable[str]):
        self.exact = set(exact)
        self.patterns = [compile_pattern(p) for p in regexes]

    def is_match(self, text: str) -> bool:
        if text in self.exact:
            return True
        return any(p.search(text) for p in self.patterns)


class BlockRules:
    """
    Compiled hide and rename rules from an extract configuration.

    A block is hidden when its definition is not public, or when its localized
    name, subtype ID or composite ID matches the corresponding hide rule. The
    first rename rule whose pattern matches the localized name renames it.
    """

    def __init__(
        self,
        hide_block_by_exact_name: Iterable[str] = (),
        hide_block_by_regex_name: Iterable[str] = (),
        hide_block_by_exact_subtype_id: Iterable[str] = (),
        hide_block_by_regex_subtype_id: Iterable[str] = (),
        hide_block_by_exact_id: Iterable[str] = (),
        hide_block_by_regex_id: Iterable[str] = (),
        rename_block_by_regex: Iterable[Tuple[str, str]] = (),
    ):
        self.by_name = HideRule(hide_block_by_exact_name, hide_block_by_regex_name)
        self.by_subtype_id = HideRule(hide_block_by_exact_subtype_id, hide_block_by_regex_subtype_id)
        self.by_id = HideRule(hide_block_by_exact_id, hide_block_by_regex_id)
        self.renames = [RenameRule(pattern, replacement) for pattern, replacement in rename_block_by_regex]

    @classmethod
    def from_config(cls, config) -> "BlockRules":
        return cls(
            config.hide_block_by_exact_name,
            config.hide_block_by_regex_name,
            config.hide_block_by_exact_subtype_id,
            config.hide_block_by_regex_subtype_id,
            config.hide_block_by_exact_id,
            config.hide_block_by_regex_id,
            config.rename_block_by_regex,
        )

    def is_hidden(self, public: bool, localized_name: str, subtype_id: str, block_id: str) -> bool:
        if not public:
            return True
        return (self.by_name.is_match(localized_name)
                or self.by_subtype_id.is_match(subtype_id)
                or self.by_id.is_match(block_id))

    def rename(self, localized_name: str) -> Optional[str]:
        for rule in self.renames:
            if rule.matches(localized_name):
                renamed = rule.apply(localized_name)
                logger.debug(f"Renamed block '{localized_name}' to '{renamed}'")
                return renamed
        return None
