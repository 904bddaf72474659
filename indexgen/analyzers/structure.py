"""Composition of the individual analyzers into one structural analysis pass."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .architecture import ArchitectureAnalyzer
from .base import Analyzer
from .coverage import CoverageAnalyzer
from .dependencies import DependencyAnalyzer
from .signals import SignalAnalyzer
from ..logging import get_logger
from ..models import FileNode, FolderNode, StructuralAnalysis

logger = get_logger("analyzers")


def default_analyzers() -> List[Analyzer]:
    return [ArchitectureAnalyzer(), SignalAnalyzer(), CoverageAnalyzer(), DependencyAnalyzer()]


class StructuralAnalyzer:
    """Derives project-wide facts from the complete file and folder set.

    The result is recomputed from scratch on every call; analyzers only read the
    nodes they are given.
    """

    def __init__(self, analyzers: Optional[Sequence[Analyzer]] = None) -> None:
        self.analyzers = list(analyzers) if analyzers is not None else default_analyzers()

    def analyze(
        self, files: Sequence[FileNode], folders: Sequence[FolderNode]
    ) -> StructuralAnalysis:
        analysis = StructuralAnalysis()
        for analyzer in self.analyzers:
            if not analyzer.supports(files, folders):
                logger.debug("Analyzer %s skipped", analyzer.name)
                continue
            analyzer.analyze(files, folders, analysis)
        return analysis


__all__ = ["StructuralAnalyzer", "default_analyzers"]
