"""Coarse, content-length-biased complexity scoring.

This is not a cyclomatic-complexity computation. Scores come from line-count
brackets, branching keyword counts, literal brace balance and a few idiom
signals, then get clamped to ``[1, 10]``. Longer files score higher both
through the line bracket and through the larger keyword count they tend to
carry; both contributions are kept.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Pattern, Tuple

MIN_SCORE = 1
MAX_SCORE = 10

_JS_KEYWORDS = r"\b(?:if|else|for|while|switch|case|catch|try)\b|&&|\|\||\?\?"

BRANCH_KEYWORDS: Mapping[str, str] = MappingProxyType(
    {
        "javascript": _JS_KEYWORDS,
        "typescript": _JS_KEYWORDS,
        "python": r"\b(?:if|elif|else|for|while|try|except|with|and|or|match|case)\b",
        "php": r"\b(?:if|elseif|else|for|foreach|while|switch|case|catch|try)\b|&&|\|\|",
        "java": r"\b(?:if|else|for|while|switch|case|catch|try)\b|&&|\|\|",
        "csharp": r"\b(?:if|else|for|foreach|while|switch|case|catch|try)\b|&&|\|\|",
        "go": r"\b(?:if|else|for|switch|case|select)\b|&&|\|\|",
        "ruby": r"\b(?:if|elsif|else|unless|for|while|until|case|when|rescue|and|or)\b|&&|\|\|",
        "rust": r"\b(?:if|else|for|while|loop|match)\b|&&|\|\|",
    }
)

LINE_BRACKETS: Tuple[Tuple[int, int], ...] = ((1000, 3), (500, 2), (200, 1))
KEYWORD_BRACKETS: Tuple[Tuple[int, int], ...] = ((100, 4), (50, 3), (25, 2), (10, 1))
NESTING_BRACKETS: Tuple[Tuple[int, int], ...] = ((5, 2), (3, 1))

_CONCURRENCY = re.compile(
    r"\basync\b|\bawait\b|\bPromise\b|\bThread\b|\bthreading\b|\bgoroutine\b|\bgo\s+func\b|\bsynchronized\b|\bMutex\b"
)
_DEFERRED = re.compile(r"\bcallback\b|\.then\s*\(|=>|\bdefer\b|\bsetTimeout\s*\(|\blambda\b")
_REGEX = re.compile(r"\bRegExp\b|\bre\.(?:compile|match|search|sub|findall)\b|\bpreg_\w+\s*\(|\bRegex\b|[=(,:;!&|?]\s*/[^/*\n][^/\n]*/[gimsuy]*\s*[;,.)\]]")


@dataclass(frozen=True)
class ComplexityScorer:
    """Scores file content on a bounded 1-10 scale."""

    branch_keywords: Mapping[str, str] = field(default_factory=lambda: BRANCH_KEYWORDS)
    default_language: str = "javascript"
    _compiled: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    def score(self, content: str, language: str | None = None) -> int:
        if not content:
            return MIN_SCORE

        score = MIN_SCORE
        score += _bracket(count_lines(content), LINE_BRACKETS)
        score += _bracket(self.count_branches(content, language), KEYWORD_BRACKETS)
        score += _bracket(max_brace_depth(content), NESTING_BRACKETS)
        score += 1 if _CONCURRENCY.search(content) else 0
        score += 1 if _DEFERRED.search(content) else 0
        score += 1 if _REGEX.search(content) else 0
        return max(MIN_SCORE, min(MAX_SCORE, score))

    def count_branches(self, content: str, language: str | None = None) -> int:
        return len(self._pattern_for(language).findall(content))

    def _pattern_for(self, language: str | None) -> Pattern[str]:
        key = (language or "").lower()
        if key not in self.branch_keywords:
            key = self.default_language
        pattern = self._compiled.get(key)
        if pattern is None:
            pattern = re.compile(self.branch_keywords[key])
            self._compiled[key] = pattern
        return pattern


def count_lines(content: str) -> int:
    return len(content.split("\n"))


def max_brace_depth(content: str) -> int:
    """Approximate nesting by literal ``{``/``}`` balance, ignoring syntax."""
    depth = 0
    deepest = 0
    for char in content:
        if char == "{":
            depth += 1
            deepest = max(deepest, depth)
        elif char == "}":
            depth = max(0, depth - 1)
    return deepest


def _bracket(value: int, brackets: Tuple[Tuple[int, int], ...]) -> int:
    for threshold, points in brackets:
        if value > threshold:
            return points
    return 0


__all__ = ["ComplexityScorer", "count_lines", "max_brace_depth", "MAX_SCORE", "MIN_SCORE"]
