"""Core data models shared across indexgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath
from typing import Dict, Iterator, List, Optional


class SemanticType(str, Enum):
    """Heuristic role of a file inside the project."""

    CLASS = "class"
    MODULE = "module"
    COMPONENT = "component"
    SERVICE = "service"
    CONTROLLER = "controller"
    MODEL = "model"
    UTILITY = "utility"
    TEST = "test"
    CONFIG = "config"
    README = "readme"
    DOCUMENTATION = "documentation"
    SCRIPT = "script"
    STYLE = "style"
    TEMPLATE = "template"
    DATA = "data"
    OTHER = "other"


@dataclass
class ExtractedMetadata:
    """Regex-derived symbols for a file; approximate by construction."""

    imports: List[str] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)
    classes: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.imports or self.exports or self.classes or self.functions)


@dataclass
class FileNode:
    """A single eligible file discovered during a scan."""

    path: str
    relative_path: str
    extension: str
    language: str
    semantic_type: SemanticType
    size_bytes: int
    line_count: int = 0
    complexity: int = 1
    last_modified: Optional[datetime] = None
    metadata: Optional[ExtractedMetadata] = None
    doc: str = ""
    description: str = ""
    ai_detailed_doc: Optional[str] = None

    @property
    def name(self) -> str:
        return PurePosixPath(self.relative_path).name


@dataclass
class FolderNode:
    """A directory in the scanned tree; parents own their children exclusively."""

    path: str
    relative_path: str
    depth: int
    included: bool = True
    files: List[FileNode] = field(default_factory=list)
    subfolders: List["FolderNode"] = field(default_factory=list)
    description: str = ""

    @property
    def name(self) -> str:
        if self.relative_path in ("", "."):
            return PurePosixPath(self.path).name or self.path
        return PurePosixPath(self.relative_path).name

    def add_file(self, file: FileNode) -> None:
        self.files.append(file)

    def add_subfolder(self, folder: "FolderNode") -> None:
        self.subfolders.append(folder)

    def iter_folders(self) -> Iterator["FolderNode"]:
        """Yield this folder and every descendant folder, depth-first."""
        yield self
        for child in self.subfolders:
            yield from child.iter_folders()

    def iter_files(self) -> Iterator[FileNode]:
        for folder in self.iter_folders():
            yield from folder.files


@dataclass
class ProjectInfo:
    """Declared project metadata taken from configuration."""

    root_path: str
    languages: List[str] = field(default_factory=list)
    framework: Optional[str] = None
    natural_language: str = "en"
    description: str = ""

    @property
    def title(self) -> str:
        return self.description or PurePosixPath(self.root_path).name or "Project"


@dataclass
class TestCoverage:
    __test__ = False

    test_file_count: int = 0
    source_file_count: int = 0
    estimated_percentage: int = 0
    has_tests: bool = False


@dataclass
class DocumentationStats:
    doc_file_count: int = 0
    files_with_inline_docs_count: int = 0
    ratio: float = 0.0
    has_readme: bool = False


@dataclass
class DependencySummary:
    external: List[str] = field(default_factory=list)
    internal: List[str] = field(default_factory=list)


@dataclass
class StructuralAnalysis:
    """Project-wide facts derived from the full file and folder set."""

    architecture_patterns: List[str] = field(default_factory=lambda: ["Unknown"])
    frameworks: List[str] = field(default_factory=list)
    design_patterns: List[str] = field(default_factory=list)
    test_coverage: TestCoverage = field(default_factory=TestCoverage)
    documentation: DocumentationStats = field(default_factory=DocumentationStats)
    dependencies: DependencySummary = field(default_factory=DependencySummary)


@dataclass
class ComplexitySummary:
    average: float = 0.0
    min: int = 0
    max: int = 0
    distribution: Dict[int, int] = field(
        default_factory=lambda: {level: 0 for level in range(1, 11)}
    )


@dataclass
class IndexMetadata:
    total_files: int = 0
    total_folders: int = 0
    total_size: int = 0
    indexed_at: Optional[datetime] = None
    languages: List[str] = field(default_factory=list)
    language_counts: Dict[str, int] = field(default_factory=dict)
    file_types: Dict[str, int] = field(default_factory=dict)
    complexity: ComplexitySummary = field(default_factory=ComplexitySummary)
    warnings: List[str] = field(default_factory=list)


@dataclass
class ProjectIndex:
    """Aggregate result of one indexing run."""

    project: ProjectInfo
    root: FolderNode
    files: List[FileNode]
    folders: List[FolderNode]
    analysis: StructuralAnalysis
    metadata: IndexMetadata
    ai_overview: Optional[str] = None
    ai_architecture: Optional[str] = None

    def folder_by_path(self) -> Dict[str, FolderNode]:
        """Return a relative-path keyed lookup of folders."""
        return {folder.relative_path: folder for folder in self.folders}

    def parent_of(self, relative_path: str) -> Optional[FolderNode]:
        parent = PurePosixPath(relative_path).parent.as_posix()
        lookup = self.folder_by_path()
        if parent in ("", "."):
            return lookup.get(".")
        return lookup.get(parent)
