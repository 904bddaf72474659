"""Regex-based extraction of documentation, symbols and heuristic descriptions.

None of this parses source code. Patterns are best-effort and will both miss
and over-match symbols (for example commented-out imports are still picked up).
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Iterable, List, Mapping, Pattern, Sequence, Tuple

from .models import ExtractedMetadata, FileNode, FolderNode, SemanticType

_C_STYLE_DOCS: Tuple[str, ...] = (
    r"/\*\*[\s\S]*?\*/",
    r"/\*(?!\*)[\s\S]*?\*/",
    r"//.*$",
)

DOC_PATTERNS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "javascript": _C_STYLE_DOCS,
        "typescript": _C_STYLE_DOCS,
        "java": _C_STYLE_DOCS,
        "csharp": _C_STYLE_DOCS,
        "php": _C_STYLE_DOCS + (r"#.*$",),
        "python": (r'"""[\s\S]*?"""', r"'''[\s\S]*?'''", r"#.*$"),
        "ruby": (r"=begin[\s\S]*?=end", r"#.*$"),
        "shell": (r"#.*$",),
    }
)

IMPORT_PATTERNS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "javascript": (
            r"^\s*import\s+(?:[\w*{}\s,]+\s+from\s+)?['\"]([^'\"]+)['\"]",
            r"require\(\s*['\"]([^'\"]+)['\"]\s*\)",
            r"import\(\s*['\"]([^'\"]+)['\"]\s*\)",
        ),
        "python": (
            r"^\s*from\s+(\.*[\w.]*)\s+import\b",
            r"^\s*import\s+([\w.]+)",
        ),
        "php": (r"^\s*use\s+([\w\\]+)", r"(?:require|include)(?:_once)?\s*\(?\s*['\"]([^'\"]+)['\"]"),
        "java": (r"^\s*import\s+(?:static\s+)?([\w.]+)",),
        "kotlin": (r"^\s*import\s+([\w.]+)",),
        "csharp": (r"^\s*using\s+([\w.]+)\s*;",),
        "go": (r"^\s*import\s+\"([^\"]+)\"", r"^\s+\"([^\"]+)\"\s*$"),
        "rust": (r"^\s*use\s+([\w:]+)",),
        "ruby": (r"^\s*require(?:_relative)?\s+['\"]([^'\"]+)['\"]",),
        "c": (r"^\s*#include\s+[<\"]([^>\"]+)[>\"]",),
        "cpp": (r"^\s*#include\s+[<\"]([^>\"]+)[>\"]",),
    }
)

EXPORT_PATTERNS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "javascript": (
            r"^\s*export\s+(?:default\s+)?(?:async\s+)?(?:class|function\*?|const|let|var)\s+(\w+)",
            r"module\.exports\.(\w+)\s*=",
            r"exports\.(\w+)\s*=",
        ),
        "python": (r"^__all__\s*=\s*\[([^\]]*)\]",),
    }
)

CLASS_PATTERNS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "javascript": (r"^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(\w+)",),
        "python": (r"^\s*class\s+(\w+)",),
        "php": (r"^\s*(?:abstract\s+|final\s+)?(?:class|interface|trait)\s+(\w+)",),
        "java": (r"\b(?:class|interface|enum|record)\s+(\w+)",),
        "csharp": (r"\b(?:class|interface|struct|record)\s+(\w+)",),
        "go": (r"^\s*type\s+(\w+)\s+(?:struct|interface)\b",),
        "rust": (r"^\s*(?:pub\s+)?(?:struct|enum|trait)\s+(\w+)",),
        "ruby": (r"^\s*(?:class|module)\s+([\w:]+)",),
        "cpp": (r"^\s*(?:class|struct)\s+(\w+)",),
    }
)

FUNCTION_PATTERNS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "javascript": (
            r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\*?\s+(\w+)",
            r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:\([^)]*\)|\w+)\s*=>",
            r"^\s+(?:static\s+)?(?:async\s+)?(?!if\b|for\b|while\b|switch\b|catch\b|return\b)(\w+)\s*\([^)]*\)\s*\{",
        ),
        "python": (r"^\s*(?:async\s+)?def\s+(\w+)",),
        "php": (r"^\s*(?:(?:public|private|protected|static|final|abstract)\s+)*function\s+(\w+)",),
        "java": (r"^\s*(?:(?:public|private|protected|static|final|abstract|synchronized)\s+)+[\w<>\[\],\s]+\s+(\w+)\s*\(",),
        "csharp": (r"^\s*(?:(?:public|private|protected|internal|static|async|override|virtual)\s+)+[\w<>\[\],\s]+\s+(\w+)\s*\(",),
        "go": (r"^\s*func\s+(?:\([^)]*\)\s*)?(\w+)\s*\(",),
        "rust": (r"^\s*(?:pub\s+)?(?:async\s+)?fn\s+(\w+)",),
        "ruby": (r"^\s*def\s+(?:self\.)?(\w+[?!]?)",),
        "c": (r"^[\w\s\*]+\s+\**(\w+)\s*\([^;]*\)\s*\{",),
        "cpp": (r"^[\w\s\*:<>&]+\s+[\*&]*([\w:~]+)\s*\([^;]*\)\s*(?:const\s*)?\{",),
    }
)

_LANGUAGE_ALIASES: Mapping[str, str] = MappingProxyType({"typescript": "javascript"})

_KEYWORD_NAMES = frozenset({"if", "for", "while", "switch", "catch", "return", "function", "else", "new"})

_DOC_LIMIT = 4000

_compiled_cache: dict = {}


def _compile(pattern: str) -> Pattern[str]:
    compiled = _compiled_cache.get(pattern)
    if compiled is None:
        compiled = re.compile(pattern, re.MULTILINE)
        _compiled_cache[pattern] = compiled
    return compiled


def _patterns_for(table: Mapping[str, Tuple[str, ...]], language: str | None) -> Tuple[str, ...]:
    key = (language or "").lower()
    key = _LANGUAGE_ALIASES.get(key, key)
    return table.get(key, ())


def _unique(values: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    result: List[str] = []
    for value in values:
        cleaned = value.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


def _find_all(patterns: Sequence[str], content: str) -> List[str]:
    found: List[str] = []
    for pattern in patterns:
        found.extend(match.group(1) for match in _compile(pattern).finditer(content))
    return found


def extract_documentation(content: str, language: str | None) -> str:
    """Collect doc comments; unknown languages fall back to C-style comment syntax."""
    patterns = DOC_PATTERNS.get((language or "").lower(), DOC_PATTERNS["javascript"])
    docs: List[str] = []
    for pattern in patterns:
        docs.extend(match.group(0) for match in _compile(pattern).finditer(content))
    return "\n".join(docs).strip()[:_DOC_LIMIT]


def extract_metadata(content: str, language: str | None) -> ExtractedMetadata:
    imports = _unique(_find_all(_patterns_for(IMPORT_PATTERNS, language), content))

    exports: List[str] = []
    for raw in _find_all(_patterns_for(EXPORT_PATTERNS, language), content):
        # ``__all__`` lists arrive as one comma-separated capture.
        exports.extend(part.strip().strip("'\"") for part in raw.split(","))

    functions = [
        name
        for name in _find_all(_patterns_for(FUNCTION_PATTERNS, language), content)
        if name not in _KEYWORD_NAMES
    ]

    return ExtractedMetadata(
        imports=imports,
        exports=_unique(exports),
        classes=_unique(_find_all(_patterns_for(CLASS_PATTERNS, language), content)),
        functions=_unique(functions),
        dependencies=[name for name in imports if is_external_import(name)],
    )


def is_external_import(name: str) -> bool:
    """Imports that are not relative or absolute paths point outside the project."""
    return not name.startswith((".", "/"))


_TYPE_DESCRIPTIONS: Mapping[SemanticType, str] = MappingProxyType(
    {
        SemanticType.README: "Project documentation and information",
        SemanticType.CONFIG: "Configuration settings and parameters",
        SemanticType.CONTROLLER: "Handles HTTP requests and application flow",
        SemanticType.SERVICE: "Business logic and service operations",
        SemanticType.MODEL: "Data model and entity definitions",
        SemanticType.COMPONENT: "UI component and user interface logic",
        SemanticType.UTILITY: "Utility functions and helper methods",
        SemanticType.DOCUMENTATION: "Project documentation",
        SemanticType.STYLE: "Stylesheet rules",
        SemanticType.TEMPLATE: "Markup or view template",
        SemanticType.SCRIPT: "Automation script",
        SemanticType.DATA: "Data file",
    }
)


def describe_file(file: FileNode, content: str | None = None) -> str:
    """Heuristic one-line description used whenever no generated text is available."""
    if file.semantic_type is SemanticType.TEST:
        return f"Test suite for {file.language} code"
    described = _TYPE_DESCRIPTIONS.get(file.semantic_type)
    if described:
        return described

    if content:
        if "class " in content or "interface " in content:
            return f"{file.language} class/interface definitions"
        if "function " in content or "def " in content or "public " in content:
            return f"{file.language} function implementations"
        if "import " in content or "require(" in content or "#include" in content:
            return f"{file.language} module with dependencies"

    return f"{file.language} source file"


_FOLDER_DESCRIPTIONS: Mapping[str, str] = MappingProxyType(
    {
        "src": "Primary source code",
        "lib": "Library code",
        "app": "Application code",
        "test": "Automated tests",
        "tests": "Automated tests",
        "__tests__": "Automated tests",
        "spec": "Test specifications",
        "docs": "Project documentation",
        "doc": "Project documentation",
        "config": "Configuration files",
        "controllers": "Request controllers",
        "services": "Service layer",
        "models": "Data models",
        "views": "Views and presentation",
        "components": "UI components",
        "utils": "Utility helpers",
        "helpers": "Utility helpers",
        "scripts": "Automation scripts",
        "assets": "Static assets",
        "public": "Publicly served assets",
    }
)


def describe_folder(folder: FolderNode) -> str:
    described = _FOLDER_DESCRIPTIONS.get(folder.name.lower())
    if described:
        return described
    if folder.depth == 0:
        return "Project root"
    count = len(folder.files)
    noun = "file" if count == 1 else "files"
    return f"Folder with {count} {noun}"


__all__ = [
    "describe_file",
    "describe_folder",
    "extract_documentation",
    "extract_metadata",
    "is_external_import",
]
