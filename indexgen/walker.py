"""Filtered directory traversal and the optional content enrichment pass."""

from __future__ import annotations

import asyncio
import math
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Set

from .classifier import FileClassifier, extension_of
from .complexity import ComplexityScorer, count_lines
from .extraction import describe_file, describe_folder, extract_documentation, extract_metadata
from .logging import WarningLog, get_logger
from .models import FileNode, FolderNode
from .path_filter import PathFilter

DEFAULT_MAX_FILE_SIZE = 1024 * 1024
# Rough bytes-per-line ratio used before file contents have been read.
BYTES_PER_LINE = 50

logger = get_logger("walker")


class IndexingError(RuntimeError):
    """Raised when the scan root cannot be walked at all."""


@dataclass
class ScanOptions:
    max_depth: int = 10
    include_hidden: bool = False
    follow_symlinks: bool = False
    include_patterns: Sequence[str] = ()
    exclude_patterns: Sequence[str] = ()
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


@dataclass
class ScanResult:
    root: FolderNode
    files: List[FileNode] = field(default_factory=list)
    folders: List[FolderNode] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    total_size: int = 0


class _ScanState:
    def __init__(self, root: Path, options: ScanOptions) -> None:
        self.root = root
        self.options = options
        self.path_filter = PathFilter(
            options.include_patterns,
            options.exclude_patterns,
            include_hidden=options.include_hidden,
        )
        self.warnings = WarningLog(logger)
        self.files: List[FileNode] = []
        self.folders: List[FolderNode] = []
        self.total_size = 0
        self.visited: Set[str] = set()


class DirectoryWalker:
    """Builds the folder/file tree for a project root without reading file contents."""

    def __init__(self, classifier: Optional[FileClassifier] = None) -> None:
        self.classifier = classifier or FileClassifier()

    def scan(self, root: str | Path, options: Optional[ScanOptions] = None) -> ScanResult:
        options = options or ScanOptions()
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise IndexingError(f"Project root not found: {root}")
        if not root_path.is_dir():
            raise IndexingError(f"Project root is not a directory: {root}")
        try:
            with os.scandir(root_path):
                pass
        except OSError as exc:
            raise IndexingError(f"Project root is not readable: {root} ({exc})") from exc

        state = _ScanState(root_path, options)
        root_folder = FolderNode(path=str(root_path), relative_path=".", depth=0)
        state.visited.add(os.path.realpath(root_path))
        state.folders.append(root_folder)
        self._walk(root_path, root_folder, state)
        self._describe_folders(state.folders)

        logger.debug(
            "Scanned %s: %d files in %d folders", root_path, len(state.files), len(state.folders)
        )
        return ScanResult(
            root=root_folder,
            files=state.files,
            folders=state.folders,
            warnings=list(state.warnings.messages),
            total_size=state.total_size,
        )

    def _walk(self, directory: Path, folder: FolderNode, state: _ScanState) -> None:
        if folder.depth >= state.options.max_depth:
            return
        try:
            with os.scandir(directory) as iterator:
                entries = list(iterator)
        except OSError as exc:
            state.warnings.warn("Skipping unreadable directory %s: %s", folder.relative_path, exc)
            return

        # Listing order is kept as-is; nothing downstream may rely on a global sort.
        for entry in entries:
            rel_path = _relative(folder, entry.name)
            try:
                if entry.is_symlink() and not state.options.follow_symlinks:
                    logger.debug("Skipping symlink %s", rel_path)
                    continue
                is_dir = entry.is_dir(follow_symlinks=state.options.follow_symlinks)
            except OSError as exc:
                state.warnings.warn("Skipping unreadable entry %s: %s", rel_path, exc)
                continue

            decision = state.path_filter.decide(rel_path, is_dir=is_dir)
            if not decision.include:
                logger.debug("Filtered %s (%s)", rel_path, decision.reason)
                continue

            if is_dir:
                self._enter_directory(entry, rel_path, folder, state)
            else:
                self._add_file(entry, rel_path, folder, state)

    def _enter_directory(
        self, entry: os.DirEntry, rel_path: str, parent: FolderNode, state: _ScanState
    ) -> None:
        real_path = os.path.realpath(entry.path)
        if real_path in state.visited:
            logger.debug("Skipping already visited directory %s", rel_path)
            return
        state.visited.add(real_path)

        child = FolderNode(path=entry.path, relative_path=rel_path, depth=parent.depth + 1)
        parent.add_subfolder(child)
        state.folders.append(child)
        self._walk(Path(entry.path), child, state)

    def _add_file(
        self, entry: os.DirEntry, rel_path: str, folder: FolderNode, state: _ScanState
    ) -> None:
        if not self.classifier.is_supported(entry.name):
            logger.debug("Skipping unsupported file %s", rel_path)
            return
        try:
            stat_result = entry.stat(follow_symlinks=state.options.follow_symlinks)
        except OSError as exc:
            state.warnings.warn("Skipping unreadable file %s: %s", rel_path, exc)
            return

        size = stat_result.st_size
        if size > state.options.max_file_size:
            state.warnings.warn(
                "Skipping %s: %d bytes exceeds the %d byte limit",
                rel_path,
                size,
                state.options.max_file_size,
            )
            return

        classification = self.classifier.classify(rel_path)
        node = FileNode(
            path=entry.path,
            relative_path=rel_path,
            extension=extension_of(entry.name),
            language=classification.language,
            semantic_type=classification.semantic_type,
            size_bytes=size,
            line_count=math.ceil(size / BYTES_PER_LINE),
            last_modified=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
        )
        node.description = describe_file(node)
        folder.add_file(node)
        state.files.append(node)
        state.total_size += size

    @staticmethod
    def _describe_folders(folders: Sequence[FolderNode]) -> None:
        for folder in folders:
            folder.description = describe_folder(folder)


class ContentEnricher:
    """Reads file contents concurrently to fill in line counts, scores, docs and symbols.

    Each file object is only touched by its own task, so distinct files can be
    enriched concurrently without locking. A failed read keeps the cheap-pass
    values for that file and becomes a warning.
    """

    def __init__(
        self,
        scorer: Optional[ComplexityScorer] = None,
        classifier: Optional[FileClassifier] = None,
        *,
        concurrency: int = 8,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.scorer = scorer or ComplexityScorer()
        self.classifier = classifier or FileClassifier()
        self.concurrency = concurrency

    async def enrich(self, files: Sequence[FileNode]) -> List[str]:
        warnings = WarningLog(logger)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def guarded(file: FileNode) -> None:
            async with semaphore:
                await self._enrich_one(file, warnings)

        results = await asyncio.gather(*(guarded(file) for file in files), return_exceptions=True)
        for file, result in zip(files, results):
            if isinstance(result, Exception):
                warnings.warn("Enrichment failed for %s: %s", file.relative_path, result)
        return list(warnings.messages)

    def enrich_sync(self, files: Sequence[FileNode]) -> List[str]:
        return asyncio.run(self.enrich(files))

    async def _enrich_one(self, file: FileNode, warnings: WarningLog) -> None:
        try:
            content = await asyncio.to_thread(_read_text, file.path)
        except OSError as exc:
            warnings.warn("Could not read %s: %s", file.relative_path, exc)
            return
        self.apply_content(file, content)

    def apply_content(self, file: FileNode, content: str) -> None:
        """Populate content-derived fields of ``file`` from its text."""
        file.line_count = count_lines(content) if content else 0
        file.complexity = self.scorer.score(content, file.language)
        file.semantic_type = self.classifier.classify(file.relative_path, content).semantic_type
        file.doc = extract_documentation(content, file.language)
        file.metadata = extract_metadata(content, file.language)
        file.description = describe_file(file, content)


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8", errors="replace")


def _relative(folder: FolderNode, name: str) -> str:
    if folder.relative_path in ("", "."):
        return name
    return f"{folder.relative_path}/{name}"


__all__ = [
    "ContentEnricher",
    "DirectoryWalker",
    "IndexingError",
    "ScanOptions",
    "ScanResult",
]
