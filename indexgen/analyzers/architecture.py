"""Architecture detection from folder-name sets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Sequence, Tuple

from .base import Analyzer
from ..models import FileNode, FolderNode, StructuralAnalysis

UNKNOWN_ARCHITECTURE = "Unknown"

FolderNamePredicate = Callable[[FrozenSet[str], Sequence[str]], bool]


@dataclass(frozen=True)
class ArchitectureRule:
    label: str
    predicate: FolderNamePredicate


def _requires(*names: str) -> FolderNamePredicate:
    required = frozenset(names)

    def predicate(present: FrozenSet[str], all_names: Sequence[str]) -> bool:
        return required <= present

    return predicate


def _many_services(present: FrozenSet[str], all_names: Sequence[str]) -> bool:
    return sum(1 for name in all_names if "service" in name) > 2


ARCHITECTURE_RULES: Tuple[ArchitectureRule, ...] = (
    ArchitectureRule("MVC", _requires("models", "views", "controllers")),
    ArchitectureRule("Layered", _requires("services", "repositories")),
    ArchitectureRule("Clean Architecture", _requires("entities", "usecases")),
    ArchitectureRule("Microservices", _many_services),
)


def detect_architecture(
    folders: Sequence[FolderNode],
    rules: Sequence[ArchitectureRule] = ARCHITECTURE_RULES,
) -> List[str]:
    """Return every matching label in rule order, or ``["Unknown"]``."""
    names = [folder.name.lower() for folder in folders if folder.depth > 0]
    present = frozenset(names)
    labels = [rule.label for rule in rules if rule.predicate(present, names)]
    return labels or [UNKNOWN_ARCHITECTURE]


class ArchitectureAnalyzer(Analyzer):
    name = "architecture"

    def __init__(self, rules: Sequence[ArchitectureRule] = ARCHITECTURE_RULES) -> None:
        self.rules = tuple(rules)

    def analyze(
        self,
        files: Sequence[FileNode],
        folders: Sequence[FolderNode],
        analysis: StructuralAnalysis,
    ) -> None:
        analysis.architecture_patterns = detect_architecture(folders, self.rules)


__all__ = [
    "ARCHITECTURE_RULES",
    "ArchitectureAnalyzer",
    "ArchitectureRule",
    "UNKNOWN_ARCHITECTURE",
    "detect_architecture",
]
