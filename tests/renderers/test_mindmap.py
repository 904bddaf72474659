"""Tests for the markdown, Mermaid and DOT mind-map renderers."""

from __future__ import annotations

import copy

import pytest

from indexgen.models import ProjectIndex
from indexgen.orchestrator import Orchestrator
from indexgen.renderers import RenderFormat, RenderOptions, render, render_dot, render_markdown, render_mermaid
from indexgen.renderers.common import RenderError, complexity_badge, complexity_emoji, format_bytes
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def wide_index(repo_builder: RepoBuilder) -> ProjectIndex:
    repo_builder.write({f"src/module_{n}.js": f"export const value{n} = {n};\n" for n in range(7)})
    return Orchestrator().build_index(repo_builder.config(project={"description": 'Say "hi"'}))


def test_markdown_mindmap_sections(sample_index: ProjectIndex) -> None:
    output = render_markdown(sample_index, RenderOptions())

    assert output.startswith("# Mind Map: Sample Project\n")
    for heading in ("## Project Overview", "## Project Structure", "## File Type Distribution", "## Complexity Overview"):
        assert heading in output
    assert "- **Total Files**: 7" in output
    assert "- **Architecture**: MVC" in output
    assert "**UserController.js** — Handles HTTP requests and application flow" in output
    assert "  - **src/** — Primary source code" in output
    assert "node_modules" not in output


def test_markdown_mindmap_respects_max_depth_and_type_filter(sample_index: ProjectIndex) -> None:
    shallow = render_markdown(sample_index, RenderOptions(max_depth=1))
    structure = shallow.split("## Project Structure")[1].split("## File Type Distribution")[0]
    assert structure.strip().splitlines() == [f"- **{sample_index.root.name}/** — Project root"]

    controllers_only = render_markdown(sample_index, RenderOptions(types_only=("controller",)))
    assert "**UserController.js**" in controllers_only
    assert "**User.js**" not in controllers_only


def test_mermaid_graph_bounds_files_per_category(wide_index: ProjectIndex) -> None:
    output = render_mermaid(wide_index, RenderOptions())

    assert output.startswith("```mermaid\ngraph TD\n")
    assert output.rstrip().endswith("```")
    assert 'ROOT["Say #quot;hi#quot;"]' in output
    assert 'ROOT --> CAT0["Source Code (7)"]' in output
    assert output.count("CAT0 --> CAT0_F") == 5

    bare = render_mermaid(wide_index, RenderOptions(), fenced=False)
    assert bare.startswith("graph TD\n")
    assert output == f"```mermaid\n{bare}```\n"


def test_dot_graph_bounds_files_per_category(wide_index: ProjectIndex) -> None:
    output = render_dot(wide_index, RenderOptions())

    assert output.startswith("digraph ProjectMindMap {")
    assert output.rstrip().endswith("}")
    assert 'label="Say \\"hi\\""' in output
    assert output.count("fillcolor=lightyellow") == 3


def test_mindmap_categories_follow_fixed_order(sample_index: ProjectIndex) -> None:
    output = render_mermaid(sample_index, RenderOptions())

    positions = [output.index(f'"{name} (') for name in ("Source Code", "Tests", "Configuration", "Documentation", "Assets")]
    assert positions == sorted(positions)
    assert "node_modules" not in output


def test_renderers_do_not_mutate_the_index(sample_index: ProjectIndex) -> None:
    before = copy.deepcopy(sample_index)

    for fmt in RenderFormat:
        render(sample_index, fmt, RenderOptions(max_depth=2, types_only=("model",), max_file_size=500))

    assert sample_index == before


def test_format_parsing_and_dispatch(sample_index: ProjectIndex) -> None:
    assert RenderFormat.parse(None) is RenderFormat.MARKDOWN
    assert RenderFormat.parse("") is RenderFormat.MARKDOWN
    assert RenderFormat.parse("MD") is RenderFormat.MARKDOWN
    assert RenderFormat.parse("graphviz") is RenderFormat.DOT
    assert RenderFormat.parse("yaml") is RenderFormat.API_SPEC
    with pytest.raises(RenderError):
        RenderFormat.parse("pdf")

    assert isinstance(render(sample_index, "full"), list)
    assert isinstance(render(sample_index, "json"), dict)
    assert render(sample_index).startswith("# Mind Map:")


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 Bytes"), (500, "500 Bytes"), (1024, "1 KB"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5 MB")],
)
def test_format_bytes(size: int, expected: str) -> None:
    assert format_bytes(size) == expected


def test_complexity_markers() -> None:
    assert complexity_badge(8) == " 🔥"
    assert complexity_badge(7) == " ⚡"
    assert complexity_badge(4) == ""
    assert [complexity_emoji(score) for score in (9, 6, 4, 1)] == ["🔥", "⚡", "💡", "🟢"]
