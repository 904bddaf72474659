"""Base classes for structural analyzer plugins."""

from abc import ABC, abstractmethod
from typing import Sequence

from ..models import FileNode, FolderNode, StructuralAnalysis


class Analyzer(ABC):
    """Contract for analyzers that contribute to a project's structural analysis."""

    name: str = "analyzer"

    def supports(self, files: Sequence[FileNode], folders: Sequence[FolderNode]) -> bool:
        """Return True when this analyzer should run for the project."""
        return True

    @abstractmethod
    def analyze(
        self,
        files: Sequence[FileNode],
        folders: Sequence[FolderNode],
        analysis: StructuralAnalysis,
    ) -> None:
        """Record derived facts on ``analysis``; never mutate files or folders."""
