"""Optional text enrichment of an index through a local language model.

Every call may fail. Failures keep the heuristic text that indexing already
produced and are reported as warnings, so a missing runtime never stops a run.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Awaitable, Callable, List, Mapping, Protocol, Sequence

from ..logging import WarningLog, get_logger
from ..models import FileNode, FolderNode, ProjectIndex

logger = get_logger("llm")

RESPONSE_LIMIT = 500
DETAIL_THRESHOLD = 5

LANGUAGE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "en": "English",
        "fr": "French",
        "es": "Spanish",
        "de": "German",
        "it": "Italian",
        "pt": "Portuguese",
        "ru": "Russian",
        "zh": "Chinese",
        "ja": "Japanese",
    }
)

SYSTEM_PROMPT = (
    "You are a senior engineer documenting a codebase. Stay grounded in the facts you are "
    "given and never invent files, tools or behaviour."
)


class TextRunner(Protocol):
    def run(self, prompt: str, *, system: str | None = None) -> str: ...


class SubjectKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"
    PROJECT = "project"
    ARCHITECTURE = "architecture"
    FILE_DETAIL = "file_detail"


@dataclass
class TextGenerationRequest:
    subject_kind: SubjectKind
    context: Mapping[str, object] = field(default_factory=dict)


def clean_response(response: str) -> str:
    """Trim, drop a leading bullet dash, collapse blank lines and cap the length."""
    text = response.strip()
    text = re.sub(r"^\s*-\s*", "", text)
    text = re.sub(r"\n\s*\n", "\n", text)
    return text[:RESPONSE_LIMIT]


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, "English")


def _join(values: object, limit: int | None = None) -> str:
    items = [str(value) for value in values] if isinstance(values, (list, tuple)) else []
    if limit is not None:
        items = items[:limit]
    return ", ".join(items) or "None"


def _file_prompt(context: Mapping[str, object]) -> str:
    doc = str(context.get("doc") or "")
    lines = [
        f"Describe this {context.get('language')} file briefly:",
        "",
        f"File: {context.get('path')}",
        f"Type: {context.get('type')}",
        f"Size: {context.get('line_count')} lines",
    ]
    if doc:
        lines.append(f"Documentation: {doc[:200]}")
    lines += [
        "",
        "Provide a concise description (1-2 sentences) of what this file does.",
        f"Write in {context.get('natural_language')}.",
        "Focus on the file's purpose and role in the project.",
    ]
    return "\n".join(lines)


def _folder_prompt(context: Mapping[str, object]) -> str:
    lines = [
        "Describe this project folder briefly:",
        "",
        f"Folder: {context.get('path')}",
        f"Files: {context.get('file_count', 0)}",
    ]
    if context.get("description"):
        lines.append(f"Current description: {context['description']}")
    lines += [
        "",
        "Based on the folder name and context, provide a brief description (1 sentence) "
        "of what this folder contains.",
        f"Write in {context.get('natural_language')}.",
        "Focus on the folder's purpose in the project structure.",
    ]
    return "\n".join(lines)


def _project_prompt(context: Mapping[str, object]) -> str:
    return "\n".join(
        [
            "Analyze this software project and provide a comprehensive overview:",
            "",
            "Project Information:",
            f"- Languages: {_join(context.get('languages'))}",
            f"- Total Files: {context.get('total_files')}",
            f"- Architecture Patterns: {_join(context.get('architecture'))}",
            f"- Frameworks: {_join(context.get('frameworks'))}",
            "",
            "Please provide:",
            "1. A brief project summary",
            "2. Main technologies and frameworks used",
            "3. Architecture overview",
            "4. Key components and their roles",
            "5. Overall complexity assessment",
            "",
            f"Write in {context.get('natural_language')}.",
            "Keep it concise but informative (max 300 words).",
        ]
    )


def _architecture_prompt(context: Mapping[str, object]) -> str:
    return "\n".join(
        [
            "Analyze the architecture of this software project:",
            "",
            "Top-level folders:",
            *(f"- {name}" for name in context.get("folders") or []),
            "",
            f"Architecture Patterns Detected: {_join(context.get('architecture'))}",
            f"Design Patterns: {_join(context.get('design_patterns'))}",
            "",
            "Provide an analysis covering:",
            "1. Overall architecture assessment",
            "2. Strengths and potential improvements",
            "3. Code organization quality",
            "4. Scalability considerations",
            "5. Recommendations for development",
            "",
            f"Write in {context.get('natural_language')}.",
            "Be technical but accessible (max 400 words).",
        ]
    )


def _file_detail_prompt(context: Mapping[str, object]) -> str:
    doc = str(context.get("doc") or "")
    lines = [
        "Analyze this source code file in detail:",
        "",
        f"File: {context.get('path')}",
        f"Type: {context.get('type')}",
        f"Language: {context.get('language')}",
        f"Complexity: {context.get('complexity')}/10",
        f"Lines: {context.get('line_count')}",
    ]
    if doc:
        lines.append(f"Documentation: {doc[:500]}")
    lines += [
        f"Classes: {_join(context.get('classes'))}",
        f"Functions: {_join(context.get('functions'), 5)}",
        f"Dependencies: {_join(context.get('dependencies'), 5)}",
        "",
        "Provide detailed documentation including:",
        "1. Purpose and responsibility",
        "2. Key components (classes, functions)",
        "3. Dependencies and relationships",
        "4. Complexity analysis",
        "5. Potential improvements",
        "",
        f"Write in {context.get('natural_language')}.",
        "Be technical and detailed (max 200 words).",
    ]
    return "\n".join(lines)


PROMPT_BUILDERS: Mapping[SubjectKind, Callable[[Mapping[str, object]], str]] = MappingProxyType(
    {
        SubjectKind.FILE: _file_prompt,
        SubjectKind.FOLDER: _folder_prompt,
        SubjectKind.PROJECT: _project_prompt,
        SubjectKind.ARCHITECTURE: _architecture_prompt,
        SubjectKind.FILE_DETAIL: _file_detail_prompt,
    }
)


def build_prompt(request: TextGenerationRequest) -> str:
    return PROMPT_BUILDERS[request.subject_kind](request.context)


def file_request(file: FileNode, natural_language: str, *, detailed: bool = False) -> TextGenerationRequest:
    metadata = file.metadata
    context = {
        "path": file.relative_path,
        "type": file.semantic_type.value,
        "language": file.language,
        "line_count": file.line_count,
        "complexity": file.complexity,
        "doc": file.doc,
        "classes": list(metadata.classes) if metadata else [],
        "functions": list(metadata.functions) if metadata else [],
        "dependencies": list(metadata.dependencies) if metadata else [],
        "natural_language": language_name(natural_language),
    }
    kind = SubjectKind.FILE_DETAIL if detailed else SubjectKind.FILE
    return TextGenerationRequest(kind, context)


def folder_request(folder: FolderNode, natural_language: str) -> TextGenerationRequest:
    return TextGenerationRequest(
        SubjectKind.FOLDER,
        {
            "path": folder.relative_path,
            "file_count": len(folder.files),
            "description": folder.description,
            "natural_language": language_name(natural_language),
        },
    )


def project_request(index: ProjectIndex) -> TextGenerationRequest:
    return TextGenerationRequest(
        SubjectKind.PROJECT,
        {
            "languages": list(index.metadata.languages),
            "total_files": index.metadata.total_files,
            "architecture": list(index.analysis.architecture_patterns),
            "frameworks": list(index.analysis.frameworks),
            "natural_language": language_name(index.project.natural_language),
        },
    )


def architecture_request(index: ProjectIndex) -> TextGenerationRequest:
    return TextGenerationRequest(
        SubjectKind.ARCHITECTURE,
        {
            "folders": [folder.relative_path for folder in index.root.subfolders],
            "architecture": list(index.analysis.architecture_patterns),
            "design_patterns": list(index.analysis.design_patterns),
            "natural_language": language_name(index.project.natural_language),
        },
    )


@dataclass
class _Job:
    label: str
    request: TextGenerationRequest
    apply: Callable[[str], None]


class Describer:
    """Dispatches generation requests in bounded batches with a pause between batches."""

    def __init__(
        self,
        runner: TextRunner,
        *,
        batch_size: int = 5,
        detail_batch_size: int = 3,
        batch_delay: float = 1.0,
        detail_threshold: int = DETAIL_THRESHOLD,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if batch_size < 1 or detail_batch_size < 1:
            raise ValueError("batch sizes must be at least 1")
        self.runner = runner
        self.batch_size = batch_size
        self.detail_batch_size = detail_batch_size
        self.batch_delay = batch_delay
        self.detail_threshold = detail_threshold
        self._sleep = sleep

    def generate(self, request: TextGenerationRequest) -> str:
        """Run one request synchronously; raises ``RuntimeError`` on failure or empty output."""
        cleaned = clean_response(self.runner.run(build_prompt(request), system=SYSTEM_PROMPT))
        if not cleaned:
            raise RuntimeError(f"empty {request.subject_kind.value} description")
        return cleaned

    async def enhance(self, index: ProjectIndex) -> List[str]:
        """Replace heuristic file and folder descriptions where generation succeeds."""
        language = index.project.natural_language
        jobs = [
            _Job(file.relative_path, file_request(file, language), _setter(file, "description"))
            for file in index.files
        ]
        jobs.extend(
            _Job(folder.relative_path, folder_request(folder, language), _setter(folder, "description"))
            for folder in index.folders
        )
        warnings = WarningLog(logger)
        await self._run_batched(jobs, self.batch_size, warnings)
        return list(warnings.messages)

    async def document(self, index: ProjectIndex) -> List[str]:
        """Generate the project overview, architecture notes and detailed docs for complex files."""
        warnings = WarningLog(logger)
        overview_jobs = [
            _Job("project overview", project_request(index), _setter(index, "ai_overview")),
            _Job("architecture analysis", architecture_request(index), _setter(index, "ai_architecture")),
        ]
        if not await self._run_batched(overview_jobs, len(overview_jobs), warnings):
            return list(warnings.messages)

        language = index.project.natural_language
        detail_jobs = [
            _Job(file.relative_path, file_request(file, language, detailed=True), _setter(file, "ai_detailed_doc"))
            for file in index.files
            if file.complexity > self.detail_threshold
        ]
        await self._run_batched(detail_jobs, self.detail_batch_size, warnings)
        return list(warnings.messages)

    async def _run_batched(self, jobs: Sequence[_Job], batch_size: int, warnings: WarningLog) -> bool:
        """Return False when a whole batch failed and the remaining jobs were abandoned."""
        for start in range(0, len(jobs), batch_size):
            if start:
                await self._sleep(self.batch_delay)
            batch = jobs[start : start + batch_size]
            results = await asyncio.gather(
                *(asyncio.to_thread(self.generate, job.request) for job in batch),
                return_exceptions=True,
            )
            failures = 0
            for job, result in zip(batch, results):
                if isinstance(result, Exception):
                    failures += 1
                    warnings.warn("Text generation failed for %s: %s", job.label, result)
                else:
                    job.apply(result)
            if failures == len(batch):
                remaining = len(jobs) - start - len(batch)
                if remaining:
                    warnings.warn(
                        "Text generation unavailable; keeping heuristic text for %d remaining items",
                        remaining,
                    )
                return False
        return True


def _setter(target: object, attribute: str) -> Callable[[str], None]:
    def apply(value: str) -> None:
        setattr(target, attribute, value)

    return apply


__all__ = [
    "Describer",
    "LANGUAGE_NAMES",
    "SubjectKind",
    "TextGenerationRequest",
    "architecture_request",
    "build_prompt",
    "clean_response",
    "file_request",
    "folder_request",
    "language_name",
    "project_request",
]
