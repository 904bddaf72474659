"""Shared render options, errors and presentation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..models import FileNode, ProjectIndex, SemanticType

DEFAULT_MAX_OUTPUT_SIZE = 10 * 1024 * 1024
TOOL_NAME = "indexgen"


class RenderError(ValueError):
    """Raised when a render call cannot be served, e.g. for an unknown format."""


class RenderFormat(str, Enum):
    MARKDOWN = "markdown"
    MERMAID = "mermaid"
    DOT = "dot"
    FULL = "full"
    API_SPEC = "api-spec"
    JSON = "json"

    @classmethod
    def parse(cls, value: "str | RenderFormat | None") -> "RenderFormat":
        """Resolve a user-supplied format name; empty values mean markdown."""
        if isinstance(value, RenderFormat):
            return value
        key = (value or "").strip().lower()
        if not key:
            return cls.MARKDOWN
        key = _FORMAT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise RenderError(f"Unknown output format '{value}'. Expected one of: {choices}") from None


_FORMAT_ALIASES: Mapping[str, str] = MappingProxyType(
    {"md": "markdown", "graphviz": "dot", "gv": "dot", "api_spec": "api-spec", "yaml": "api-spec", "yml": "api-spec"}
)

MINDMAP_FORMATS: Tuple[RenderFormat, ...] = (RenderFormat.MARKDOWN, RenderFormat.MERMAID, RenderFormat.DOT)


@dataclass(frozen=True)
class RenderOptions:
    max_depth: int = 10
    types_only: Optional[Tuple[str, ...]] = None
    max_file_size: int = DEFAULT_MAX_OUTPUT_SIZE
    split: bool = True

    def allows(self, file: FileNode) -> bool:
        return not self.types_only or file.semantic_type.value in self.types_only


FILE_ICONS: Mapping[SemanticType, str] = MappingProxyType(
    {
        SemanticType.CLASS: "🏗️",
        SemanticType.MODULE: "📦",
        SemanticType.COMPONENT: "🧩",
        SemanticType.SERVICE: "⚙️",
        SemanticType.CONTROLLER: "🎮",
        SemanticType.MODEL: "📊",
        SemanticType.UTILITY: "🔧",
        SemanticType.TEST: "🧪",
        SemanticType.CONFIG: "⚙️",
        SemanticType.README: "📖",
        SemanticType.DOCUMENTATION: "📝",
        SemanticType.SCRIPT: "📜",
        SemanticType.STYLE: "🎨",
        SemanticType.TEMPLATE: "📄",
        SemanticType.DATA: "📈",
    }
)
DEFAULT_ICON = "📄"

CATEGORY_ORDER: Tuple[str, ...] = ("Source Code", "Tests", "Configuration", "Documentation", "Assets")

_CATEGORY_BY_TYPE: Mapping[SemanticType, str] = MappingProxyType(
    {
        SemanticType.TEST: "Tests",
        SemanticType.CONFIG: "Configuration",
        SemanticType.README: "Documentation",
        SemanticType.DOCUMENTATION: "Documentation",
        SemanticType.STYLE: "Assets",
        SemanticType.TEMPLATE: "Assets",
        SemanticType.DATA: "Assets",
    }
)

_PLURAL_TITLES: Mapping[SemanticType, str] = MappingProxyType(
    {
        SemanticType.CLASS: "Classes",
        SemanticType.UTILITY: "Utilities",
        SemanticType.CONFIG: "Configuration",
        SemanticType.DOCUMENTATION: "Documentation",
        SemanticType.DATA: "Data",
        SemanticType.README: "Readme",
        SemanticType.OTHER: "Other",
    }
)


def file_icon(file: FileNode) -> str:
    return FILE_ICONS.get(file.semantic_type, DEFAULT_ICON)


def complexity_badge(complexity: int) -> str:
    """Mind-map badge: high above 7, medium above 4."""
    if complexity > 7:
        return " 🔥"
    if complexity > 4:
        return " ⚡"
    return ""


def complexity_emoji(complexity: int) -> str:
    if complexity >= 8:
        return "🔥"
    if complexity >= 6:
        return "⚡"
    if complexity >= 4:
        return "💡"
    return "🟢"


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB", "TB")
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(units) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {units[exponent]}"


def type_title(semantic_type: SemanticType) -> str:
    return _PLURAL_TITLES.get(semantic_type, f"{semantic_type.value.capitalize()}s")


def project_title(index: ProjectIndex, default: str = "Project") -> str:
    return index.project.description or default


def filter_files(files: Iterable[FileNode], options: RenderOptions) -> List[FileNode]:
    return [file for file in files if options.allows(file)]


def group_by_category(files: Iterable[FileNode]) -> Dict[str, List[FileNode]]:
    """Group files into mind-map categories, dropping empty ones, in fixed order."""
    groups: Dict[str, List[FileNode]] = {name: [] for name in CATEGORY_ORDER}
    for file in files:
        groups[_CATEGORY_BY_TYPE.get(file.semantic_type, "Source Code")].append(file)
    return {name: members for name, members in groups.items() if members}


def group_by_type(files: Sequence[FileNode]) -> Dict[SemanticType, List[FileNode]]:
    """Group by semantic type in enum order, each group sorted by descending complexity."""
    groups: Dict[SemanticType, List[FileNode]] = {}
    for semantic_type in SemanticType:
        members = [file for file in files if file.semantic_type is semantic_type]
        if members:
            groups[semantic_type] = sorted(members, key=lambda file: file.complexity, reverse=True)
    return groups


def timestamp(index: ProjectIndex) -> str:
    indexed_at = index.metadata.indexed_at
    return indexed_at.isoformat() if indexed_at else ""


__all__ = [
    "CATEGORY_ORDER",
    "DEFAULT_MAX_OUTPUT_SIZE",
    "FILE_ICONS",
    "MINDMAP_FORMATS",
    "RenderError",
    "RenderFormat",
    "RenderOptions",
    "TOOL_NAME",
    "complexity_badge",
    "complexity_emoji",
    "file_icon",
    "filter_files",
    "format_bytes",
    "group_by_category",
    "group_by_type",
    "project_title",
    "timestamp",
    "type_title",
]
