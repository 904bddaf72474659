"""Mind-map renderers: nested markdown bullets, Mermaid and Graphviz DOT."""

from __future__ import annotations

from typing import List

from .common import (
    RenderOptions,
    complexity_badge,
    file_icon,
    filter_files,
    format_bytes,
    group_by_category,
    project_title,
)
from ..models import FolderNode, ProjectIndex

MERMAID_FILES_PER_CATEGORY = 5
DOT_FILES_PER_CATEGORY = 3


def render_markdown(index: ProjectIndex, options: RenderOptions) -> str:
    metadata = index.metadata
    analysis = index.analysis
    lines = [
        f"# Mind Map: {project_title(index, 'Project Documentation')}",
        "",
        "## Project Overview",
        "",
        f"- **Languages**: {', '.join(metadata.languages)}",
        f"- **Total Files**: {metadata.total_files}",
        f"- **Total Size**: {format_bytes(metadata.total_size)}",
    ]
    if analysis.frameworks:
        lines.append(f"- **Frameworks**: {', '.join(analysis.frameworks)}")
    if analysis.architecture_patterns:
        lines.append(f"- **Architecture**: {', '.join(analysis.architecture_patterns)}")

    lines += ["", "## Project Structure", ""]
    _structure_lines(index.root, 0, options, lines)

    lines += ["", "## File Type Distribution", ""]
    for type_name, count in metadata.file_types.items():
        lines.append(f"- **{type_name}**: {count} files")

    complexity = metadata.complexity
    lines += [
        "",
        "## Complexity Overview",
        "",
        f"- **Average Complexity**: {complexity.average}/10",
        f"- **Most Complex**: {complexity.max}/10",
        f"- **Least Complex**: {complexity.min}/10",
    ]
    return "\n".join(lines) + "\n"


def _structure_lines(folder: FolderNode, depth: int, options: RenderOptions, lines: List[str]) -> None:
    if depth >= options.max_depth:
        return
    indent = "  " * depth
    lines.append(f"{indent}- **{folder.name}/** — {folder.description or 'Folder'}")
    if depth + 1 >= options.max_depth:
        return
    child_indent = "  " * (depth + 1)
    for file in filter_files(folder.files, options):
        lines.append(
            f"{child_indent}- {file_icon(file)} **{file.name}** — "
            f"{file.description or 'File'}{complexity_badge(file.complexity)}"
        )
    for child in folder.subfolders:
        _structure_lines(child, depth + 1, options, lines)


def _mermaid_label(text: str) -> str:
    return text.replace('"', "#quot;")


def render_mermaid(index: ProjectIndex, options: RenderOptions, *, fenced: bool = True) -> str:
    """Mermaid flowchart; ``fenced=False`` gives bare source for standalone ``.mmd`` files."""
    lines = ["graph TD", f'    ROOT["{_mermaid_label(project_title(index))}"]']
    categories = group_by_category(filter_files(index.files, options))
    for position, (category, members) in enumerate(categories.items()):
        category_id = f"CAT{position}"
        lines.append(f'    ROOT --> {category_id}["{category} ({len(members)})"]')
        for file_position, file in enumerate(members[:MERMAID_FILES_PER_CATEGORY]):
            lines.append(
                f'    {category_id} --> {category_id}_F{file_position}["{_mermaid_label(file.name)}"]'
            )
    if fenced:
        lines = ["```mermaid", *lines, "```"]
    return "\n".join(lines) + "\n"


def _dot_label(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def render_dot(index: ProjectIndex, options: RenderOptions) -> str:
    lines = [
        "digraph ProjectMindMap {",
        "  rankdir=LR;",
        "  node [shape=box, style=rounded];",
        "",
        f'  "root" [label="{_dot_label(project_title(index))}", style=filled, fillcolor=lightblue];',
    ]
    categories = group_by_category(filter_files(index.files, options))
    for position, (category, members) in enumerate(categories.items()):
        category_id = f"cat{position}"
        lines.append(
            f'  "{category_id}" [label="{category}\\n({len(members)} files)", style=filled, fillcolor=lightgreen];'
        )
        lines.append(f'  "root" -> "{category_id}";')
        for file_position, file in enumerate(members[:DOT_FILES_PER_CATEGORY]):
            file_id = f"{category_id}_f{file_position}"
            lines.append(
                f'  "{file_id}" [label="{_dot_label(file.name)}", style=filled, fillcolor=lightyellow];'
            )
            lines.append(f'  "{category_id}" -> "{file_id}";')
    lines.append("}")
    return "\n".join(lines) + "\n"


__all__ = ["render_dot", "render_markdown", "render_mermaid"]
