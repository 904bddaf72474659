"""Framework and design-pattern detection from textual signals.

Triggers are lower-case strings searched over file names, relative
paths, extracted doc comments and import lists. A hit means "mentioned
somewhere in the project", not "verified to be in use".
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Iterable, List, Mapping, Pattern, Sequence, Tuple

from .base import Analyzer
from ..models import FileNode, FolderNode, StructuralAnalysis

FRAMEWORK_TRIGGERS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "React": ("react", ".jsx", ".tsx"),
        "Vue": ("vue",),
        "Angular": ("@angular", "angular"),
        "Svelte": ("svelte",),
        "Next.js": ("next/", "next.config"),
        "Express": ("express",),
        "NestJS": ("@nestjs",),
        "jQuery": ("jquery",),
        "Laravel": ("laravel", "illuminate\\", "artisan"),
        "Symfony": ("symfony",),
        "Django": ("django",),
        "Flask": ("flask",),
        "FastAPI": ("fastapi",),
        "Spring": ("springframework", "@springbootapplication"),
        "Ruby on Rails": ("rails", "activerecord"),
        "ASP.NET": ("microsoft.aspnetcore", "system.web"),
        "Jest": ("jest",),
        "Mocha": ("mocha",),
        "PHPUnit": ("phpunit",),
        "Pytest": ("pytest",),
    }
)

DESIGN_PATTERN_TRIGGERS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "Singleton": ("singleton", "getinstance"),
        "Factory": ("factory",),
        "Builder": ("builder",),
        "Observer": ("observer", "eventemitter", "subscribe"),
        "Strategy": ("strategy",),
        "Adapter": ("adapter",),
        "Decorator": ("decorator",),
        "Repository": ("repository",),
        "Middleware": ("middleware",),
        "Dependency Injection": ("inject", "container"),
    }
)


def file_signals(file: FileNode) -> str:
    """Lower-cased text blob of every signal source for ``file``."""
    parts = [file.name, file.relative_path, file.doc]
    if file.metadata is not None:
        parts.extend(file.metadata.imports)
    return "\n".join(part for part in parts if part).lower()


def _trigger_pattern(words: Tuple[str, ...], whole_words: bool) -> Pattern[str]:
    alternatives = []
    for word in words:
        escaped = re.escape(word)
        if whole_words and word[:1].isalnum():
            escaped = r"\b" + escaped
        if whole_words and word[-1:].isalnum():
            escaped = escaped + r"\b"
        alternatives.append(escaped)
    return re.compile("|".join(alternatives))


def detect_signals(
    haystacks: Iterable[str],
    triggers: Mapping[str, Tuple[str, ...]],
    *,
    whole_words: bool = False,
) -> List[str]:
    """Return labels, in table order, whose triggers appear in any haystack.

    With ``whole_words`` a trigger must not be glued to surrounding letters, so
    ``express`` does not fire on ``expression``.
    """
    remaining = {
        label: _trigger_pattern(words, whole_words) for label, words in triggers.items() if words
    }
    found: set[str] = set()
    for haystack in haystacks:
        for label, pattern in list(remaining.items()):
            if pattern.search(haystack):
                found.add(label)
                del remaining[label]
        if not remaining:
            break
    return [label for label in triggers if label in found]


class SignalAnalyzer(Analyzer):
    """Populates detected frameworks and design patterns."""

    name = "signals"

    def __init__(
        self,
        frameworks: Mapping[str, Tuple[str, ...]] = FRAMEWORK_TRIGGERS,
        design_patterns: Mapping[str, Tuple[str, ...]] = DESIGN_PATTERN_TRIGGERS,
    ) -> None:
        self.frameworks = frameworks
        self.design_patterns = design_patterns

    def supports(self, files: Sequence[FileNode], folders: Sequence[FolderNode]) -> bool:
        return bool(files)

    def analyze(
        self,
        files: Sequence[FileNode],
        folders: Sequence[FolderNode],
        analysis: StructuralAnalysis,
    ) -> None:
        haystacks = [file_signals(file) for file in files]
        analysis.frameworks = detect_signals(haystacks, self.frameworks, whole_words=True)
        analysis.design_patterns = detect_signals(haystacks, self.design_patterns)


__all__ = [
    "DESIGN_PATTERN_TRIGGERS",
    "FRAMEWORK_TRIGGERS",
    "SignalAnalyzer",
    "detect_signals",
    "file_signals",
]
