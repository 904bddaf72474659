"""Counting ratios for tests and inline documentation."""

from __future__ import annotations

from typing import List, Sequence

from .base import Analyzer
from ..classifier import PROGRAMMING_LANGUAGES
from ..models import (
    DocumentationStats,
    FileNode,
    FolderNode,
    SemanticType,
    StructuralAnalysis,
    TestCoverage,
)

_DOC_TYPES = frozenset({SemanticType.README, SemanticType.DOCUMENTATION})


def source_files(files: Sequence[FileNode]) -> List[FileNode]:
    """Files written in a programming language that are not themselves tests."""
    return [
        file
        for file in files
        if file.language in PROGRAMMING_LANGUAGES and file.semantic_type is not SemanticType.TEST
    ]


def estimate_test_coverage(files: Sequence[FileNode]) -> TestCoverage:
    tests = sum(1 for file in files if file.semantic_type is SemanticType.TEST)
    sources = len(source_files(files))
    percentage = min(100, round(tests / sources * 100)) if sources else 0
    return TestCoverage(
        test_file_count=tests,
        source_file_count=sources,
        estimated_percentage=percentage,
        has_tests=tests > 0,
    )


def measure_documentation(files: Sequence[FileNode]) -> DocumentationStats:
    sources = source_files(files)
    documented = sum(1 for file in sources if file.doc.strip())
    ratio = round(documented / len(sources) * 100, 1) if sources else 0.0
    return DocumentationStats(
        doc_file_count=sum(1 for file in files if file.semantic_type in _DOC_TYPES),
        files_with_inline_docs_count=documented,
        ratio=ratio,
        has_readme=any(file.semantic_type is SemanticType.README for file in files),
    )


class CoverageAnalyzer(Analyzer):
    name = "coverage"

    def analyze(
        self,
        files: Sequence[FileNode],
        folders: Sequence[FolderNode],
        analysis: StructuralAnalysis,
    ) -> None:
        analysis.test_coverage = estimate_test_coverage(files)
        analysis.documentation = measure_documentation(files)


__all__ = [
    "CoverageAnalyzer",
    "estimate_test_coverage",
    "measure_documentation",
    "source_files",
]
