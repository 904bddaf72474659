"""Project-wide dependency aggregation from regex-derived import lists."""

from __future__ import annotations

from typing import Sequence

from .base import Analyzer
from ..extraction import is_external_import
from ..models import DependencySummary, FileNode, FolderNode, StructuralAnalysis


def summarise_dependencies(files: Sequence[FileNode]) -> DependencySummary:
    external: set[str] = set()
    internal: set[str] = set()
    for file in files:
        if file.metadata is None:
            continue
        for name in file.metadata.imports:
            (external if is_external_import(name) else internal).add(name)
    return DependencySummary(external=sorted(external), internal=sorted(internal))


class DependencyAnalyzer(Analyzer):
    name = "dependencies"

    def supports(self, files, folders) -> bool:
        return any(file.metadata is not None for file in files)

    def analyze(
        self,
        files: Sequence[FileNode],
        folders: Sequence[FolderNode],
        analysis: StructuralAnalysis,
    ) -> None:
        analysis.dependencies = summarise_dependencies(files)


__all__ = ["DependencyAnalyzer", "summarise_dependencies"]
