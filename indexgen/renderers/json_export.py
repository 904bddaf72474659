"""JSON export mirroring the complete index."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .common import TOOL_NAME, timestamp
from ..models import (
    ExtractedMetadata,
    FileNode,
    FolderNode,
    ProjectIndex,
    StructuralAnalysis,
)

EXPORT_VERSION = "1.0.0"


def export_json(index: ProjectIndex) -> Dict[str, Any]:
    """Return JSON-ready data; ``structure`` holds every folder and file exactly once."""
    return {
        "exportInfo": {
            "tool": TOOL_NAME,
            "version": EXPORT_VERSION,
            "exportedAt": timestamp(index),
        },
        "project": {
            "rootPath": index.project.root_path,
            "languages": list(index.project.languages),
            "framework": index.project.framework,
            "naturalLanguage": index.project.natural_language,
            "description": index.project.description,
            "aiOverview": index.ai_overview,
            "aiArchitecture": index.ai_architecture,
        },
        "metadata": _metadata(index),
        "analysis": _analysis(index.analysis),
        "files": [_file(file) for file in index.files],
        "structure": _folder_tree(index.root),
    }


def dumps_json(index: ProjectIndex, *, indent: int = 2) -> str:
    return json.dumps(export_json(index), indent=indent, ensure_ascii=False)


def _metadata(index: ProjectIndex) -> Dict[str, Any]:
    metadata = index.metadata
    complexity = metadata.complexity
    return {
        "totalFiles": metadata.total_files,
        "totalFolders": metadata.total_folders,
        "totalSize": metadata.total_size,
        "indexedAt": timestamp(index),
        "languages": list(metadata.languages),
        "languageCounts": dict(metadata.language_counts),
        "fileTypes": dict(metadata.file_types),
        "complexity": {
            "average": complexity.average,
            "min": complexity.min,
            "max": complexity.max,
            "distribution": {str(level): count for level, count in complexity.distribution.items()},
        },
        "warnings": list(metadata.warnings),
    }


def _analysis(analysis: StructuralAnalysis) -> Dict[str, Any]:
    coverage = analysis.test_coverage
    documentation = analysis.documentation
    return {
        "architecturePatterns": list(analysis.architecture_patterns),
        "frameworks": list(analysis.frameworks),
        "designPatterns": list(analysis.design_patterns),
        "testCoverage": {
            "testFileCount": coverage.test_file_count,
            "sourceFileCount": coverage.source_file_count,
            "estimatedPercentage": coverage.estimated_percentage,
            "hasTests": coverage.has_tests,
        },
        "documentation": {
            "docFileCount": documentation.doc_file_count,
            "filesWithInlineDocsCount": documentation.files_with_inline_docs_count,
            "ratio": documentation.ratio,
            "hasReadme": documentation.has_readme,
        },
        "dependencies": {
            "external": list(analysis.dependencies.external),
            "internal": list(analysis.dependencies.internal),
        },
    }


def _extracted(metadata: ExtractedMetadata | None) -> Dict[str, List[str]] | None:
    if metadata is None:
        return None
    return {
        "imports": list(metadata.imports),
        "exports": list(metadata.exports),
        "classes": list(metadata.classes),
        "functions": list(metadata.functions),
        "dependencies": list(metadata.dependencies),
    }


def _file(file: FileNode) -> Dict[str, Any]:
    return {
        "name": file.name,
        "path": file.path,
        "relativePath": file.relative_path,
        "extension": file.extension,
        "language": file.language,
        "type": file.semantic_type.value,
        "size": file.size_bytes,
        "lineCount": file.line_count,
        "complexity": file.complexity,
        "lastModified": file.last_modified.isoformat() if file.last_modified else None,
        "description": file.description,
        "doc": file.doc,
        "aiDetailedDoc": file.ai_detailed_doc,
        "metadata": _extracted(file.metadata),
    }


def _folder_tree(folder: FolderNode) -> Dict[str, Any]:
    children: List[Dict[str, Any]] = [
        {
            "type": "file",
            "name": file.name,
            "relativePath": file.relative_path,
            "fileType": file.semantic_type.value,
            "language": file.language,
            "complexity": file.complexity,
            "description": file.description,
        }
        for file in folder.files
    ]
    children.extend(_folder_tree(child) for child in folder.subfolders)
    return {
        "type": "folder",
        "name": folder.name,
        "relativePath": folder.relative_path,
        "depth": folder.depth,
        "description": folder.description,
        "children": children,
    }


__all__ = ["dumps_json", "export_json"]
