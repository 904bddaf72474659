"""Pipeline orchestration: index a project, optionally describe it, and export renders."""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .analyzers import StructuralAnalyzer, discover_analyzers
from .config import ConfigError, IndexConfig
from .llm import Describer, LLMRunner
from .logging import WarningLog, get_logger
from .models import (
    ComplexitySummary,
    FileNode,
    IndexMetadata,
    ProjectIndex,
    ProjectInfo,
)
from .path_filter import load_gitignore_patterns
from .renderers import (
    DocumentationRenderer,
    PandocPdfRenderer,
    RenderFormat,
    RenderOptions,
    combine_parts,
    dumps_json,
    render,
    render_api_spec,
    render_mermaid,
)
from .renderers.common import DEFAULT_MAX_OUTPUT_SIZE, MINDMAP_FORMATS, RenderError
from .walker import ContentEnricher, DirectoryWalker, ScanOptions

DEFAULT_OUTPUT_DIR = "./docs"
FULL_DOCUMENTATION_NAME = "full_documentation"
API_SPEC_NAME = "api_spec.yml"
JSON_EXPORT_NAME = "project_data.json"

MINDMAP_EXTENSIONS: Dict[RenderFormat, str] = {
    RenderFormat.MARKDOWN: "md",
    RenderFormat.MERMAID: "mmd",
    RenderFormat.DOT: "dot",
}

DescriberFactory = Callable[[IndexConfig], Optional[Describer]]


@dataclass
class ExportResult:
    """Rendered outputs of one export run, keyed by file name."""

    index: ProjectIndex
    outputs: Dict[str, str] = field(default_factory=dict)
    written: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    dry_run: bool = False


class Orchestrator:
    """Coordinates scanning, enrichment, analysis, text generation and export."""

    def __init__(
        self,
        walker: DirectoryWalker | None = None,
        enricher: ContentEnricher | None = None,
        analyzer: StructuralAnalyzer | None = None,
        describer_factory: DescriberFactory | None = None,
        pdf_renderer: PandocPdfRenderer | None = None,
        documentation_renderer: DocumentationRenderer | None = None,
    ) -> None:
        self.walker = walker or DirectoryWalker()
        self._enricher = enricher
        self._analyzer = analyzer
        self._describer_factory = describer_factory or self._default_describer
        self.pdf_renderer = pdf_renderer or PandocPdfRenderer()
        self.documentation_renderer = documentation_renderer or DocumentationRenderer()
        self.logger = get_logger("orchestrator")

    def build_index(self, config: IndexConfig, *, enrich: bool = True) -> ProjectIndex:
        """Scan, enrich and analyse the configured project into a fresh index.

        Root path problems raise ``IndexingError`` and no index is produced;
        everything else is collected into ``metadata.warnings``.
        """
        root = config.project.root_path
        self.logger.info("Indexing %s", root)
        warnings = WarningLog(self.logger)

        exclude = list(config.exclude)
        if config.general.use_gitignore:
            for pattern in load_gitignore_patterns(Path(root)):
                if pattern not in exclude:
                    exclude.append(pattern)

        options = ScanOptions(
            max_depth=config.general.max_depth,
            include_hidden=not config.general.ignore_hidden,
            follow_symlinks=config.general.follow_symlinks,
            include_patterns=tuple(config.include),
            exclude_patterns=tuple(exclude),
            max_file_size=config.general.max_file_size,
        )
        result = self.walker.scan(root, options)
        warnings.extend(result.warnings)
        self.logger.debug("Walker discovered %d files", len(result.files))

        if enrich and result.files:
            enricher = self._enricher or ContentEnricher(concurrency=config.general.concurrency)
            warnings.extend(enricher.enrich_sync(result.files))

        analysis = self._select_analyzer(config).analyze(result.files, result.folders)

        metadata = build_metadata(result.files, len(result.folders), result.total_size)
        metadata.warnings = list(warnings.messages)
        index = ProjectIndex(
            project=ProjectInfo(
                root_path=str(root),
                languages=list(config.project.languages),
                framework=config.project.framework,
                natural_language=config.project.natural_language,
                description=config.project.description,
            ),
            root=result.root,
            files=result.files,
            folders=result.folders,
            analysis=analysis,
            metadata=metadata,
        )
        self.logger.info(
            "Indexed %d files in %d folders", metadata.total_files, metadata.total_folders
        )
        return index

    def describe(self, index: ProjectIndex, config: IndexConfig, *, detailed: bool = False) -> List[str]:
        """Run optional text generation over ``index``; failures only add warnings."""
        describer = self._resolve_describer(config)
        if describer is None:
            return []
        warnings = asyncio.run(describer.enhance(index))
        if detailed:
            warnings.extend(asyncio.run(describer.document(index)))
        index.metadata.warnings.extend(warnings)
        return warnings

    def export_mindmap(
        self,
        config: IndexConfig,
        output_dir: Path | str = DEFAULT_OUTPUT_DIR,
        fmt: "str | RenderFormat | None" = None,
        *,
        max_depth: int = 10,
        types_only: Optional[Sequence[str]] = None,
        use_ai: bool = True,
        dry_run: bool = False,
    ) -> ExportResult:
        """Render a mind map; dry runs skip text generation and write nothing."""
        resolved = RenderFormat.parse(fmt)
        if resolved not in MINDMAP_FORMATS:
            choices = ", ".join(item.value for item in MINDMAP_FORMATS)
            raise RenderError(f"'{resolved.value}' is not a mind map format. Expected one of: {choices}")

        index = self.build_index(config)
        if use_ai and not dry_run and index.files:
            self.describe(index, config)

        options = RenderOptions(
            max_depth=max_depth,
            types_only=tuple(types_only) if types_only else None,
        )
        if resolved is RenderFormat.MERMAID:
            content = render_mermaid(index, options, fenced=False)
        else:
            content = render(index, resolved, options)
        name = f"mindmap.{MINDMAP_EXTENSIONS[resolved]}"
        outcome = ExportResult(index=index, outputs={name: content}, dry_run=dry_run)
        self._finish(outcome, Path(output_dir))
        return outcome

    def export_full(
        self,
        config: IndexConfig,
        output_dir: Path | str = DEFAULT_OUTPUT_DIR,
        *,
        max_size: int = DEFAULT_MAX_OUTPUT_SIZE,
        json_export: bool = False,
        pdf: bool = False,
        use_ai: bool = True,
        dry_run: bool = False,
    ) -> ExportResult:
        """Render full documentation, the API spec and optional JSON/PDF outputs."""
        if max_size < 1:
            raise RenderError("max_size must be a positive number of bytes")
        index = self.build_index(config)
        if use_ai and not dry_run and index.files:
            self.describe(index, config, detailed=True)

        options = RenderOptions(max_file_size=max_size)
        parts = self.documentation_renderer.render(index, options)
        outputs: Dict[str, str] = {}
        if len(parts) > 1:
            for number, part in enumerate(parts, start=1):
                outputs[f"{FULL_DOCUMENTATION_NAME}-{number}.md"] = part
        else:
            outputs[f"{FULL_DOCUMENTATION_NAME}.md"] = parts[0]
        outputs[API_SPEC_NAME] = render_api_spec(index, options)
        if json_export:
            outputs[JSON_EXPORT_NAME] = dumps_json(index)

        outcome = ExportResult(index=index, outputs=outputs, dry_run=dry_run)
        self._finish(outcome, Path(output_dir))
        if pdf and not dry_run:
            self._write_pdf(parts, Path(output_dir), outcome)
        return outcome

    def _finish(self, outcome: ExportResult, output_dir: Path) -> None:
        outcome.warnings = list(outcome.index.metadata.warnings)
        if outcome.dry_run:
            return
        output_dir = output_dir.expanduser().resolve()
        output_dir.mkdir(parents=True, exist_ok=True)
        for name, content in outcome.outputs.items():
            path = output_dir / name
            path.write_text(content, encoding="utf-8")
            outcome.written.append(path)
            self.logger.info("Wrote %s", path)

    def _write_pdf(self, parts: Sequence[str], output_dir: Path, outcome: ExportResult) -> None:
        target = output_dir.expanduser().resolve() / f"{FULL_DOCUMENTATION_NAME}.pdf"
        try:
            outcome.written.append(self.pdf_renderer.render(combine_parts(parts), target))
        except RuntimeError as exc:
            message = f"PDF generation failed: {exc}"
            self.logger.warning(message)
            outcome.warnings.append(message)

    def _select_analyzer(self, config: IndexConfig) -> StructuralAnalyzer:
        if self._analyzer is not None:
            return self._analyzer
        try:
            analyzers = discover_analyzers(config.analyzers.enabled)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        return StructuralAnalyzer(analyzers)

    def _resolve_describer(self, config: IndexConfig) -> Optional[Describer]:
        if not config.llm.enabled:
            self.logger.debug("Text generation disabled; keeping heuristic descriptions.")
            return None
        return self._describer_factory(config)

    def _default_describer(self, config: IndexConfig) -> Optional[Describer]:
        llm = config.llm
        try:
            runner = LLMRunner(
                llm.model,
                base_url=llm.base_url,
                temperature=llm.temperature,
                max_tokens=llm.max_tokens,
                request_timeout=llm.request_timeout,
            )
            runner.list_models()
        except RuntimeError as exc:
            self.logger.warning("Text generation unavailable (%s); keeping heuristic descriptions.", exc)
            return None
        return Describer(runner, batch_size=llm.batch_size, batch_delay=llm.batch_delay)


def build_metadata(files: Sequence[FileNode], folder_count: int, total_size: int) -> IndexMetadata:
    """Aggregate counts, language and type tallies and the complexity histogram."""
    language_counts = Counter(file.language for file in files)
    type_counts = Counter(file.semantic_type.value for file in files)
    return IndexMetadata(
        total_files=len(files),
        total_folders=folder_count,
        total_size=total_size,
        indexed_at=datetime.now(timezone.utc),
        languages=sorted(language_counts),
        language_counts=dict(sorted(language_counts.items())),
        file_types=dict(type_counts.most_common()),
        complexity=summarise_complexity(files),
    )


def summarise_complexity(files: Sequence[FileNode]) -> ComplexitySummary:
    summary = ComplexitySummary()
    if not files:
        return summary
    scores = [file.complexity for file in files]
    for score in scores:
        summary.distribution[score] = summary.distribution.get(score, 0) + 1
    summary.average = round(sum(scores) / len(scores), 1)
    summary.min = min(scores)
    summary.max = max(scores)
    return summary


__all__ = [
    "API_SPEC_NAME",
    "DEFAULT_OUTPUT_DIR",
    "ExportResult",
    "JSON_EXPORT_NAME",
    "Orchestrator",
    "build_metadata",
    "summarise_complexity",
]
