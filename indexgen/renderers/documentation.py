"""Full markdown documentation with a generated table of contents and size-bounded splitting."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader

from .common import (
    TOOL_NAME,
    RenderOptions,
    complexity_emoji,
    file_icon,
    filter_files,
    format_bytes,
    group_by_type,
    project_title,
    timestamp,
    type_title,
)
from ..models import FileNode, FolderNode, ProjectIndex

TEXT_TREE_DEPTH = 3
INTERNAL_MODULE_LIMIT = 10
SYMBOL_LIMIT = 5
DOC_EXCERPT_LIMIT = 500
SECTION_PREFIX = "## "

_FENCE = re.compile(r"^\s*(`{3,}|~{3,})")
_HEADING = re.compile(r"^(#{2,3})\s+(.*)$")
_GENERATED_HEADING = re.compile(r"^[ ]{0,3}#{1,6}[ \t]+", re.MULTILINE)
EMBEDDED_HEADING = "##### "


def _iter_lines(markdown: str) -> Iterator[Tuple[str, bool]]:
    """Yield ``(line, inside_code_fence)`` pairs, keeping line endings."""
    fence: Optional[str] = None
    for line in markdown.splitlines(keepends=True):
        match = _FENCE.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                yield line, True
                continue
            yield line, False
        else:
            if match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
                fence = None
            yield line, True


class TableOfContentsBuilder:
    """Builds a linked ToC from level two and three headings outside code blocks."""

    TITLE = "Table of Contents"

    def build_block(self, markdown: str) -> str:
        headings = self._headings(markdown)
        if not headings:
            return ""
        output: List[str] = [f"{SECTION_PREFIX}{self.TITLE}", ""]
        for level, title, anchor in headings:
            indent = "  " * (level - 2)
            output.append(f"{indent}- [{title}](#{anchor})")
        output += ["", "---", "", ""]
        return "\n".join(output)

    def _headings(self, markdown: str) -> List[Tuple[int, str, str]]:
        headings: List[Tuple[int, str, str]] = []
        seen: Dict[str, int] = {}
        for line, in_code in _iter_lines(markdown):
            if in_code:
                continue
            match = _HEADING.match(line.strip())
            if not match:
                continue
            title = match.group(2).strip()
            anchor = self._slugify(title)
            # Repeated headings get GitHub-style numeric suffixes.
            count = seen.get(anchor, 0)
            seen[anchor] = count + 1
            if count:
                anchor = f"{anchor}-{count}"
            headings.append((len(match.group(1)), title, anchor))
        return headings

    @staticmethod
    def _slugify(title: str) -> str:
        slug = title.lower()
        slug = re.sub(r"[^a-z0-9\s-]", "", slug)
        slug = re.sub(r"\s+", "-", slug)
        slug = re.sub(r"-+", "-", slug)
        return slug.strip("-")


def split_documentation(content: str, max_bytes: int) -> List[str]:
    """Split at ``## `` section starts so every part stays within ``max_bytes`` where possible.

    Sections are never cut; a single section larger than the limit becomes its
    own oversized part. Concatenating the parts reproduces ``content`` exactly.
    """
    parts: List[str] = []
    current = ""
    for section in _sections(content):
        if current and len((current + section).encode("utf-8")) > max_bytes:
            parts.append(current)
            current = section
        else:
            current += section
    if current:
        parts.append(current)
    return parts or [content]


def _sections(content: str) -> List[str]:
    sections: List[str] = []
    current: List[str] = []
    for line, in_code in _iter_lines(content):
        if not in_code and line.startswith(SECTION_PREFIX) and current:
            sections.append("".join(current))
            current = []
        current.append(line)
    if current:
        sections.append("".join(current))
    return sections


def _fence_for(text: str) -> str:
    longest = max((len(run) for run in re.findall(r"`{3,}", text)), default=2)
    return "`" * max(3, longest + 1)


def demote_headings(text: str) -> str:
    """Rewrite headings in generated text so they cannot open a document section."""
    return _GENERATED_HEADING.sub(EMBEDDED_HEADING, text.strip())


def _bullets(values: Iterable[str], empty: str) -> List[str]:
    lines = [f"- {value}" for value in values]
    return lines or [f"- {empty}"]


class DocumentationRenderer:
    """Assembles the full documentation from section builders.

    Title page and overview come from Jinja2 templates; the remaining sections
    are generated in code because they are mostly loops over files.
    """

    def __init__(self, templates_dir: Path | None = None, *, tool_name: str = TOOL_NAME) -> None:
        self.tool_name = tool_name
        self.toc = TableOfContentsBuilder()
        self._env = self._create_env(templates_dir)

    def render(self, index: ProjectIndex, options: RenderOptions) -> List[str]:
        content = self.build(index, options)
        if options.split and len(content.encode("utf-8")) > options.max_file_size:
            return split_documentation(content, options.max_file_size)
        return [content]

    def build(self, index: ProjectIndex, options: RenderOptions) -> str:
        body = "".join(
            [
                self._overview(index),
                self._architecture(index),
                self._file_documentation(index, options),
                self._appendices(index),
            ]
        )
        return self._title_page(index) + self.toc.build_block(body) + body

    def _title_page(self, index: ProjectIndex) -> str:
        indexed_at = index.metadata.indexed_at
        return self._env.get_template("title_page.md.j2").render(
            title=project_title(index, "Project Documentation"),
            tool_name=self.tool_name,
            date=indexed_at.strftime("%Y-%m-%d") if indexed_at else "",
            project=index.project,
            languages=index.metadata.languages,
            metadata=index.metadata,
            total_size=format_bytes(index.metadata.total_size),
            ai_overview=demote_headings(index.ai_overview) if index.ai_overview else None,
        )

    def _overview(self, index: ProjectIndex) -> str:
        analysis = index.analysis
        return self._env.get_template("overview.md.j2").render(
            languages=index.metadata.languages,
            analysis=analysis,
            coverage=analysis.test_coverage,
            documentation=analysis.documentation,
        )

    def _architecture(self, index: ProjectIndex) -> str:
        dependencies = index.analysis.dependencies
        lines = ["## Architecture Analysis", "", "### Project Structure", "", "```"]
        _text_tree(index.root, 0, lines)
        lines += ["```", "", "### Dependencies", "", "**External Dependencies:**"]
        lines += _bullets(dependencies.external, "None detected")
        lines += ["", "**Internal Modules:**"]
        lines += _bullets(dependencies.internal[:INTERNAL_MODULE_LIMIT], "None detected")
        if index.ai_architecture:
            lines += ["", "### AI Architecture Analysis", "", demote_headings(index.ai_architecture)]
        lines += ["", "---", "", ""]
        return "\n".join(lines)

    def _file_documentation(self, index: ProjectIndex, options: RenderOptions) -> str:
        chunks = ["## File Documentation\n\n"]
        for semantic_type, files in group_by_type(filter_files(index.files, options)).items():
            chunks.append(f"### {type_title(semantic_type)}\n\n")
            chunks.extend(self._file_entry(file) for file in files)
            chunks.append("\n")
        return "".join(chunks)

    def _file_entry(self, file: FileNode) -> str:
        lines = [
            f"#### {file.name} {complexity_emoji(file.complexity)}",
            "",
            f"**Path:** `{file.relative_path}`  ",
            f"**Type:** {file.semantic_type.value}  ",
            f"**Language:** {file.language}  ",
            f"**Lines:** {file.line_count}  ",
            f"**Complexity:** {file.complexity}/10  ",
        ]
        if file.size_bytes:
            lines.append(f"**Size:** {format_bytes(file.size_bytes)}  ")
        if file.description:
            lines += ["", f"**Description:** {file.description}"]
        if file.ai_detailed_doc:
            lines += ["", "**AI Analysis:**", "", demote_headings(file.ai_detailed_doc)]

        metadata = file.metadata
        if metadata is not None:
            if metadata.classes:
                lines += ["", f"**Classes:** {', '.join(metadata.classes)}"]
            if metadata.functions:
                lines += ["", f"**Functions:** {_truncated_list(metadata.functions)}"]
            if metadata.dependencies:
                lines += ["", f"**Dependencies:** {_truncated_list(metadata.dependencies)}"]

        doc = file.doc.strip()
        if doc:
            excerpt = doc[:DOC_EXCERPT_LIMIT] + ("..." if len(doc) > DOC_EXCERPT_LIMIT else "")
            fence = _fence_for(excerpt)
            lines += ["", "**Documentation:**", fence, excerpt, fence]

        lines += ["", "---", "", ""]
        return "\n".join(lines)

    def _appendices(self, index: ProjectIndex) -> str:
        analysis = index.analysis
        dependencies = analysis.dependencies
        lines = ["## Dependencies", "", "### External Dependencies"]
        lines += _bullets(dependencies.external, "None")
        lines += ["", "### Internal Modules"]
        lines += _bullets(dependencies.internal, "None")
        lines += ["", "## Complexity Analysis", "", "### Distribution by Complexity Level"]
        for level, count in sorted(index.metadata.complexity.distribution.items()):
            lines.append(f"- Level {level}: {count} files")

        coverage = analysis.test_coverage.estimated_percentage
        ratio = analysis.documentation.ratio
        unknown = "Unknown" in analysis.architecture_patterns
        lines += [
            "",
            "### Recommendations",
            "",
            "Based on the analysis, here are some recommendations:",
            "",
            "1. **High Complexity Files**: Review files with complexity > 7 for potential refactoring",
            f"2. **Test Coverage**: {'Consider adding more tests' if coverage < 50 else 'Good test coverage'}",
            f"3. **Documentation**: {'Add more inline documentation' if ratio < 30 else 'Good documentation coverage'}",
            "4. **Architecture**: "
            + (
                "Consider adopting a clear architectural pattern"
                if unknown
                else "Architecture patterns are well defined"
            ),
            "",
            "---",
            "",
            f"*Generated by {self.tool_name} on {timestamp(index)}*",
            "",
        ]
        return "\n".join(lines)

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


def _truncated_list(values: List[str]) -> str:
    suffix = "..." if len(values) > SYMBOL_LIMIT else ""
    return ", ".join(values[:SYMBOL_LIMIT]) + suffix


def _text_tree(folder: FolderNode, depth: int, lines: List[str]) -> None:
    if depth >= TEXT_TREE_DEPTH:
        return
    indent = "  " * depth
    lines.append(f"{indent}{folder.name}/")
    if depth + 1 >= TEXT_TREE_DEPTH:
        return
    for file in folder.files:
        lines.append(f"{'  ' * (depth + 1)}{file_icon(file)} {file.name}")
    for child in folder.subfolders:
        _text_tree(child, depth + 1, lines)


__all__ = [
    "DocumentationRenderer",
    "TableOfContentsBuilder",
    "demote_headings",
    "split_documentation",
]
