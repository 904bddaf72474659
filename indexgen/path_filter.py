"""Include/exclude evaluation for candidate paths using gitignore-style patterns."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import List, Sequence

from .logging import get_logger

_GLOB_CHARS = frozenset("*?[")

logger = get_logger("path_filter")


@dataclass(frozen=True)
class PatternRule:
    """A single normalised pattern from the include, exclude or ignore lists."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool
    has_glob: bool

    def matches(self, rel_path: str, is_dir: bool = False) -> bool:
        if not self.pattern:
            return False

        parts = [part for part in rel_path.split("/") if part]
        if not parts:
            return False

        for index, part in enumerate(parts):
            segment_is_dir = index < len(parts) - 1 or is_dir
            if self.directory_only and not segment_is_dir:
                continue
            if self.anchored or self.has_slash:
                candidate = "/".join(parts[: index + 1])
            else:
                candidate = part
            if fnmatchcase(candidate, self.pattern):
                return True

        if self.has_glob and not self.anchored and not self.directory_only:
            return fnmatchcase("/".join(parts), self.pattern)
        return False


def build_rule(pattern: str) -> PatternRule | None:
    pattern = pattern.strip().replace("\\", "/")
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    pattern = pattern.rstrip("/")

    anchored = pattern.startswith("/")
    pattern = pattern.lstrip("/")
    if not pattern:
        return None

    return PatternRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        has_slash="/" in pattern,
        has_glob=any(char in _GLOB_CHARS for char in pattern),
    )


def matches_pattern(rel_path: str, pattern: str, *, is_dir: bool = False) -> bool:
    """Return True when ``rel_path`` matches a single gitignore-style pattern."""
    rule = build_rule(pattern)
    return rule is not None and rule.matches(_normalise(rel_path), is_dir)


@dataclass(frozen=True)
class FilterDecision:
    include: bool
    reason: str = ""


class PathFilter:
    """Evaluates relative paths: excludes first, includes second, hidden entries orthogonally."""

    def __init__(
        self,
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
        *,
        include_hidden: bool = False,
    ) -> None:
        self.include_rules = _compile(include)
        self.exclude_rules = _compile(exclude)
        self.include_hidden = include_hidden

    def decide(self, relative_path: str, *, is_dir: bool = False) -> FilterDecision:
        rel_path = _normalise(relative_path)
        if rel_path in ("", "."):
            return FilterDecision(True, "root")

        if not self.include_hidden and _is_hidden(rel_path):
            return FilterDecision(False, "hidden")

        for rule in self.exclude_rules:
            if rule.matches(rel_path, is_dir):
                return FilterDecision(False, f"excluded by '{rule.pattern}'")

        # Directories are only pruned by excludes; include patterns select files beneath them.
        if is_dir or not self.include_rules:
            return FilterDecision(True)

        for rule in self.include_rules:
            if rule.matches(rel_path, is_dir):
                return FilterDecision(True, f"included by '{rule.pattern}'")
        return FilterDecision(False, "no include pattern matched")

    def is_included(self, relative_path: str, *, is_dir: bool = False) -> bool:
        return self.decide(relative_path, is_dir=is_dir).include


def decide(
    relative_path: str,
    include_patterns: Sequence[str],
    exclude_patterns: Sequence[str],
    *,
    include_hidden: bool = True,
) -> FilterDecision:
    """Evaluate a single path against pattern lists without building a reusable filter."""
    return PathFilter(
        include_patterns, exclude_patterns, include_hidden=include_hidden
    ).decide(relative_path)


def load_gitignore_patterns(root: Path) -> List[str]:
    """Read ``.gitignore`` into a flat pattern list.

    Comments, blank lines and negations are dropped; trailing slashes are
    stripped so the patterns can be merged with plain exclude entries.
    """
    path = root / ".gitignore"
    if not path.exists():
        return []
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return []

    patterns: List[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("!"):
            logger.debug("Ignoring negated gitignore pattern %s", line)
            continue
        line = line.rstrip("/")
        if line:
            patterns.append(line)
    return patterns


def _compile(patterns: Sequence[str]) -> List[PatternRule]:
    rules: List[PatternRule] = []
    for pattern in patterns:
        rule = build_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _normalise(rel_path: str) -> str:
    normalised = rel_path.replace("\\", "/").strip()
    while normalised.startswith("./"):
        normalised = normalised[2:]
    return normalised.strip("/")


def _is_hidden(rel_path: str) -> bool:
    return any(part.startswith(".") and part not in (".", "..") for part in rel_path.split("/"))


__all__ = [
    "FilterDecision",
    "PathFilter",
    "PatternRule",
    "build_rule",
    "decide",
    "load_gitignore_patterns",
    "matches_pattern",
]
