"""Definition table: validate, boundary-guard and order (pattern, target) pairs."""

from __future__ import annotations

import logging
import re
import string
import sys
import unicodedata
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

import yaml

from .models import Definition

log = logging.getLogger(__name__)

Pair = tuple[str, str]
Subset = Callable[[list[Pair]], list[Pair]]


def _punctuation_class() -> str:
    """Character-class body matching ASCII punctuation and all Unicode punctuation.

    Consecutive code points are collapsed into ranges to keep the class short.
    """
    codes = {ord(c) for c in string.punctuation}
    codes.update(
        c for c in range(sys.maxunicode + 1)
        if unicodedata.category(chr(c)).startswith("P")
    )
    ranges: list[tuple[int, int]] = []
    for c in sorted(codes):
        if ranges and ranges[-1][1] == c - 1:
            ranges[-1] = (ranges[-1][0], c)
        else:
            ranges.append((c, c))
    return "".join(
        re.escape(chr(lo)) if lo == hi else f"{re.escape(chr(lo))}-{re.escape(chr(hi))}"
        for lo, hi in ranges
    )


# Delimiters: whitespace or punctuation
_NOT_DELIMITER = rf"[^\s{_punctuation_class()}]"
# Zero-width guards: nothing but a delimiter or a string edge may flank a match
_GUARD_BEFORE = rf"(?<!{_NOT_DELIMITER})"
_GUARD_AFTER = rf"(?!{_NOT_DELIMITER})"


class DefinitionError(ValueError):
    """The definition table is malformed; nothing can be linked with it."""


def guard(pattern: str) -> str:
    """Wrap a raw pattern so it only matches as a whole token."""
    return f"{_GUARD_BEFORE}(?:{pattern}){_GUARD_AFTER}"


def compile_pattern(pattern: str) -> re.Pattern:
    try:
        return re.compile(guard(pattern))
    except re.error as e:
        raise DefinitionError(f"Invalid pattern {pattern!r}: {e}") from None


def _duplicates(values: Iterable[str]) -> list[str]:
    return [value for value, count in Counter(values).items() if count > 1]


def validate_pairs(pairs: Sequence[Pair]) -> None:
    """Raise DefinitionError if any pattern or any target occurs twice."""
    dup_patterns = _duplicates(p for p, _ in pairs)
    if dup_patterns:
        raise DefinitionError(f"Definition patterns are not unique: {dup_patterns}")
    dup_targets = _duplicates(t for _, t in pairs)
    if dup_targets:
        raise DefinitionError(f"Definition targets are not unique: {dup_targets}")


def build_definitions(
    pairs: Iterable[Pair],
    subset: Subset | None = None,
) -> list[Definition]:
    """Compile raw pairs into definitions, longest pattern first.

    Args:
        pairs: (pattern, target) pairs; patterns are regular expressions.
        subset: Optional filter applied to the raw pairs before validation,
            e.g. to exclude a pattern or a whole target site.
    """
    raw = [(str(p), str(t)) for p, t in pairs]
    if subset is not None:
        raw = list(subset(raw))

    validate_pairs(raw)

    definitions = [Definition(p, compile_pattern(p), t) for p, t in raw]
    definitions.sort(key=lambda d: len(d.pattern), reverse=True)
    log.debug("Built %d definitions", len(definitions))
    return definitions


def make_subset(
    exclude_patterns: Iterable[str] = (),
    exclude_targets: Iterable[str] = (),
) -> Subset | None:
    """Build a subset function dropping given patterns and target prefixes.

    Returns None when nothing is excluded.
    """
    patterns = frozenset(exclude_patterns)
    prefixes = tuple(exclude_targets)
    if not patterns and not prefixes:
        return None

    def subset(pairs: list[Pair]) -> list[Pair]:
        return [
            (p, t) for p, t in pairs
            if p not in patterns and not (prefixes and t.startswith(prefixes))
        ]

    return subset


def load_pairs(path: Path) -> list[Pair]:
    """Load a YAML definition table.

    Accepts a list of ``[pattern, target]`` pairs or of
    ``{pattern: ..., target: ...}`` mappings.
    """
    path = Path(path).expanduser()
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise DefinitionError(f"Invalid definition table {path}: {e}") from None
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DefinitionError(f"Invalid definition table: {path}")

    pairs: list[Pair] = []
    for i, entry in enumerate(raw):
        match entry:
            case [pattern, target]:
                pairs.append((str(pattern), str(target)))
            case {"pattern": pattern, "target": target}:
                pairs.append((str(pattern), str(target)))
            case _:
                raise DefinitionError(f"Invalid definition #{i} in {path}: {entry!r}")

    log.debug("Loaded %d definition pairs from %s", len(pairs), path)
    return pairs
