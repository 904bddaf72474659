"""Tests for the indexgen pipeline orchestrator."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from indexgen.config import ConfigError
from indexgen.llm import Describer
from indexgen.models import FileNode, SemanticType
from indexgen.orchestrator import (
    API_SPEC_NAME,
    JSON_EXPORT_NAME,
    Orchestrator,
    build_metadata,
    summarise_complexity,
)
from indexgen.renderers.common import RenderError
from indexgen.walker import IndexingError
from tests._fixtures.repo_builder import RepoBuilder


class FailingRunner:
    def __init__(self) -> None:
        self.calls = 0

    def run(self, prompt: str, *, system: str | None = None) -> str:
        self.calls += 1
        raise RuntimeError("model not loaded")


class FailingPdfRenderer:
    def render(self, markdown: str, output_path: Path) -> Path:
        raise RuntimeError("Unable to locate 'pandoc'")


class RecordingPdfRenderer:
    def __init__(self) -> None:
        self.markdown: str | None = None

    def render(self, markdown: str, output_path: Path) -> Path:
        self.markdown = markdown
        output_path.write_bytes(b"%PDF")
        return output_path


async def _no_sleep(delay: float) -> None:
    return None


def test_build_index_aggregates_metadata(sample_repo: RepoBuilder) -> None:
    index = Orchestrator().build_index(sample_repo.config())

    metadata = index.metadata
    assert metadata.total_files == 7
    assert metadata.total_folders == len(index.folders)
    assert metadata.total_size == sum(file.size_bytes for file in index.files)
    assert metadata.language_counts["javascript"] == 4
    assert metadata.languages == sorted(metadata.language_counts)
    assert sum(metadata.file_types.values()) == 7
    assert sum(metadata.complexity.distribution.values()) == 7
    assert metadata.complexity.min <= metadata.complexity.average <= metadata.complexity.max
    assert metadata.indexed_at is not None
    assert index.project.description == "Sample Project"
    assert index.analysis.architecture_patterns == ["MVC"]
    assert all(file.metadata is not None for file in index.files if file.language == "javascript")


def test_build_index_merges_gitignore_patterns(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".gitignore": "# build output\ngenerated/\n*.log\n!keep.log\n",
            "generated/bundle.js": "console.log('x');\n",
            "debug.log": "trace\n",
            "src/app.js": "export const app = 1;\n",
        }
    )

    with_gitignore = Orchestrator().build_index(repo_builder.config())
    without_gitignore = Orchestrator().build_index(repo_builder.config(general={"useGitignore": False}))

    assert [file.relative_path for file in with_gitignore.files] == ["src/app.js"]
    assert "generated/bundle.js" in {file.relative_path for file in without_gitignore.files}


def test_build_index_without_enrichment_keeps_scan_defaults(sample_repo: RepoBuilder) -> None:
    index = Orchestrator().build_index(sample_repo.config(), enrich=False)

    assert all(file.metadata is None for file in index.files)


def test_build_index_rejects_missing_root(tmp_path: Path) -> None:
    builder = RepoBuilder(tmp_path)
    config = builder.config(project={"rootPath": str(tmp_path / "absent")})

    with pytest.raises(IndexingError):
        Orchestrator().build_index(config)


def test_unknown_analyzer_is_a_config_error(sample_repo: RepoBuilder) -> None:
    config = sample_repo.config(analyzers={"enabled": ["architecture", "nope"]})

    with pytest.raises(ConfigError, match="nope"):
        Orchestrator().build_index(config)


def test_export_mindmap_writes_requested_format(sample_repo: RepoBuilder, tmp_path: Path) -> None:
    output_dir = tmp_path / "out"

    result = Orchestrator().export_mindmap(sample_repo.config(), output_dir, "mermaid")

    assert result.written == [output_dir.resolve() / "mindmap.mmd"]
    source = (output_dir / "mindmap.mmd").read_text(encoding="utf-8")
    assert source.startswith("graph TD\n")
    assert "```" not in source


def test_export_mindmap_rejects_document_formats(sample_repo: RepoBuilder, tmp_path: Path) -> None:
    with pytest.raises(RenderError, match="not a mind map format"):
        Orchestrator().export_mindmap(sample_repo.config(), tmp_path, "json")


def test_export_full_writes_documentation_and_exports(sample_repo: RepoBuilder, tmp_path: Path) -> None:
    output_dir = tmp_path / "docs"

    result = Orchestrator().export_full(sample_repo.config(), output_dir, json_export=True)

    names = sorted(path.name for path in result.written)
    assert names == sorted(["full_documentation.md", API_SPEC_NAME, JSON_EXPORT_NAME])
    data = json.loads((output_dir / JSON_EXPORT_NAME).read_text(encoding="utf-8"))
    assert data["metadata"]["totalFiles"] == 7


def test_export_full_splits_large_documentation(sample_repo: RepoBuilder, tmp_path: Path) -> None:
    result = Orchestrator().export_full(sample_repo.config(), tmp_path, max_size=1500)

    parts = [name for name in result.outputs if name.startswith("full_documentation")]
    assert len(parts) > 1
    assert parts == [f"full_documentation-{number}.md" for number in range(1, len(parts) + 1)]
    assert all((tmp_path / name).exists() for name in parts)


def test_dry_run_writes_nothing(sample_repo: RepoBuilder, tmp_path: Path) -> None:
    output_dir = tmp_path / "docs"

    result = Orchestrator().export_full(sample_repo.config(), output_dir, json_export=True, pdf=True, dry_run=True)

    assert result.dry_run is True
    assert result.written == []
    assert set(result.outputs) == {"full_documentation.md", API_SPEC_NAME, JSON_EXPORT_NAME}
    assert not output_dir.exists()


def test_pdf_failure_becomes_warning(sample_repo: RepoBuilder, tmp_path: Path) -> None:
    orchestrator = Orchestrator(pdf_renderer=FailingPdfRenderer())

    result = orchestrator.export_full(sample_repo.config(), tmp_path, pdf=True)

    assert (tmp_path / "full_documentation.md").exists()
    assert any("PDF generation failed" in warning for warning in result.warnings)


def test_pdf_receives_combined_parts(sample_repo: RepoBuilder, tmp_path: Path) -> None:
    pdf_renderer = RecordingPdfRenderer()

    result = Orchestrator(pdf_renderer=pdf_renderer).export_full(
        sample_repo.config(), tmp_path, max_size=1500, pdf=True
    )

    assert pdf_renderer.markdown is not None
    assert pdf_renderer.markdown.startswith("# Sample Project")
    assert "\n\n---\n\n## " in pdf_renderer.markdown
    assert tmp_path.resolve() / "full_documentation.pdf" in result.written


def test_failing_model_keeps_heuristic_descriptions(sample_repo: RepoBuilder, tmp_path: Path) -> None:
    runner = FailingRunner()
    orchestrator = Orchestrator(describer_factory=lambda config: Describer(runner, sleep=_no_sleep))
    config = sample_repo.config(llm={"enabled": True})
    baseline = Orchestrator().build_index(sample_repo.config())

    result = orchestrator.export_mindmap(config, tmp_path)

    assert runner.calls > 0
    assert [file.description for file in result.index.files] == [file.description for file in baseline.files]
    assert any("Text generation" in warning for warning in result.warnings)
    assert (tmp_path / "mindmap.md").exists()


def test_describer_not_used_when_disabled_or_dry(sample_repo: RepoBuilder, tmp_path: Path) -> None:
    runner = FailingRunner()
    orchestrator = Orchestrator(describer_factory=lambda config: Describer(runner, sleep=_no_sleep))

    orchestrator.export_mindmap(sample_repo.config(), tmp_path)
    orchestrator.export_mindmap(sample_repo.config(llm={"enabled": True}), tmp_path, dry_run=True)
    orchestrator.export_mindmap(sample_repo.config(llm={"enabled": True}), tmp_path, use_ai=False)

    assert runner.calls == 0


def test_default_describer_skips_unreachable_runtime(monkeypatch, sample_repo: RepoBuilder) -> None:
    def unreachable(self):
        raise RuntimeError("Ollama request failed: connection refused")

    monkeypatch.setattr("indexgen.llm.runner.LLMRunner.list_models", unreachable)
    orchestrator = Orchestrator()
    config = sample_repo.config(llm={"enabled": True})
    index = orchestrator.build_index(config)

    assert orchestrator.describe(index, config) == []


def test_summarise_complexity() -> None:
    files = [
        FileNode(
            path=f"/p/{n}.py",
            relative_path=f"{n}.py",
            extension=".py",
            language="python",
            semantic_type=SemanticType.OTHER,
            size_bytes=10,
            complexity=score,
        )
        for n, score in enumerate([1, 2, 2, 6])
    ]

    summary = summarise_complexity(files)

    assert summary.average == 2.8
    assert (summary.min, summary.max) == (1, 6)
    assert summary.distribution[2] == 2
    assert summary.distribution[10] == 0
    assert build_metadata(files, 1, 0).file_types == {SemanticType.OTHER.value: 4}


def test_parent_lookup_uses_path_index(sample_index) -> None:
    controller = next(file for file in sample_index.files if file.name == "UserController.js")

    parent = sample_index.parent_of(controller.relative_path)

    assert parent is not None
    assert controller in parent.files
    assert sample_index.parent_of("README.md") is sample_index.root
    assert sample_index.parent_of("missing/file.js") is None
