"""Language and semantic-type classification for discovered files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Callable, FrozenSet, Mapping, Optional, Tuple

from .models import SemanticType

LANGUAGE_BY_EXTENSION: Mapping[str, str] = MappingProxyType(
    {
        "js": "javascript",
        "jsx": "javascript",
        "mjs": "javascript",
        "cjs": "javascript",
        "vue": "javascript",
        "svelte": "javascript",
        "ts": "typescript",
        "tsx": "typescript",
        "php": "php",
        "phtml": "php",
        "py": "python",
        "pyw": "python",
        "java": "java",
        "cs": "csharp",
        "c": "c",
        "h": "c",
        "cpp": "cpp",
        "cc": "cpp",
        "cxx": "cpp",
        "hpp": "cpp",
        "rb": "ruby",
        "go": "go",
        "rs": "rust",
        "swift": "swift",
        "kt": "kotlin",
        "scala": "scala",
        "html": "html",
        "htm": "html",
        "css": "css",
        "scss": "scss",
        "sass": "sass",
        "less": "less",
        "json": "json",
        "xml": "xml",
        "yml": "yaml",
        "yaml": "yaml",
        "toml": "toml",
        "ini": "ini",
        "md": "markdown",
        "rst": "restructuredtext",
        "txt": "text",
        "csv": "csv",
        "sql": "sql",
        "sh": "shell",
        "bash": "shell",
        "ps1": "powershell",
    }
)

PROGRAMMING_LANGUAGES: FrozenSet[str] = frozenset(
    {
        "javascript",
        "typescript",
        "php",
        "python",
        "java",
        "csharp",
        "c",
        "cpp",
        "ruby",
        "go",
        "rust",
        "swift",
        "kotlin",
        "scala",
        "shell",
        "powershell",
    }
)

IMPORTANT_FILENAMES: Tuple[str, ...] = ("readme", "license", "changelog", "makefile", "dockerfile")

UNKNOWN_LANGUAGE = "unknown"


@dataclass(frozen=True)
class ClassifierTables:
    """Static lookup tables used by the classifier; swap in fixtures for tests."""

    language_by_extension: Mapping[str, str] = field(default_factory=lambda: LANGUAGE_BY_EXTENSION)
    programming_languages: FrozenSet[str] = PROGRAMMING_LANGUAGES
    important_filenames: Tuple[str, ...] = IMPORTANT_FILENAMES
    config_filenames: FrozenSet[str] = frozenset(
        {
            "package.json",
            "composer.json",
            "tsconfig.json",
            "pyproject.toml",
            "setup.cfg",
            "requirements.txt",
            "pom.xml",
            "build.gradle",
            "dockerfile",
            "docker-compose.yml",
            "docker-compose.yaml",
            "makefile",
            ".env.example",
            ".editorconfig",
        }
    )
    config_keywords: Tuple[str, ...] = ("config", "settings")
    config_extensions: FrozenSet[str] = frozenset({"json", "yml", "yaml", "toml", "ini", "cfg", "conf", "env"})
    doc_extensions: FrozenSet[str] = frozenset({"md", "rst", "txt", "adoc"})
    doc_filenames: Tuple[str, ...] = ("license", "changelog")
    test_keywords: Tuple[str, ...] = ("test", "spec")
    component_extensions: FrozenSet[str] = frozenset({"jsx", "tsx", "vue", "svelte"})
    utility_keywords: Tuple[str, ...] = ("util", "helper")
    style_extensions: FrozenSet[str] = frozenset({"css", "scss", "sass", "less"})
    template_extensions: FrozenSet[str] = frozenset(
        {"html", "htm", "hbs", "ejs", "twig", "j2", "jinja", "mustache", "phtml"}
    )
    script_extensions: FrozenSet[str] = frozenset({"sh", "bash", "ps1", "bat", "cmd"})
    data_extensions: FrozenSet[str] = frozenset({"csv", "tsv", "xml", "sql", "jsonl"})

    @property
    def supported_extensions(self) -> FrozenSet[str]:
        return frozenset(self.language_by_extension)


DEFAULT_TABLES = ClassifierTables()


@dataclass(frozen=True)
class FileSubject:
    """Lower-cased view of a path that classification rules inspect."""

    name: str
    stem: str
    extension: str
    path: str
    language: str

    @classmethod
    def from_path(cls, path: str, tables: ClassifierTables) -> "FileSubject":
        posix = PurePosixPath(path.replace("\\", "/"))
        name = posix.name.lower()
        extension = extension_of(name)
        stem = name[: -(len(extension) + 1)] if extension else name
        return cls(
            name=name,
            stem=stem,
            extension=extension,
            path=posix.as_posix().lower(),
            language=tables.language_by_extension.get(extension, UNKNOWN_LANGUAGE),
        )

    def mentions(self, keywords: Tuple[str, ...]) -> bool:
        return any(keyword in self.path or keyword in self.name for keyword in keywords)


RulePredicate = Callable[[FileSubject, ClassifierTables], bool]


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    predicate: RulePredicate
    semantic_type: SemanticType

    def applies(self, subject: FileSubject, tables: ClassifierTables) -> bool:
        return self.predicate(subject, tables)


def _is_config(subject: FileSubject, tables: ClassifierTables) -> bool:
    return (
        subject.name in tables.config_filenames
        or any(keyword in subject.name for keyword in tables.config_keywords)
        or subject.extension in tables.config_extensions
    )


def _is_readme(subject: FileSubject, tables: ClassifierTables) -> bool:
    return subject.name.startswith("readme")


def _is_documentation(subject: FileSubject, tables: ClassifierTables) -> bool:
    return subject.extension in tables.doc_extensions or subject.stem in tables.doc_filenames


def _is_test(subject: FileSubject, tables: ClassifierTables) -> bool:
    return subject.mentions(tables.test_keywords)


def _mentions(*keywords: str) -> RulePredicate:
    def predicate(subject: FileSubject, tables: ClassifierTables) -> bool:
        return subject.mentions(keywords)

    return predicate


def _is_component(subject: FileSubject, tables: ClassifierTables) -> bool:
    return subject.mentions(("component",)) or subject.extension in tables.component_extensions


def _is_utility(subject: FileSubject, tables: ClassifierTables) -> bool:
    return subject.mentions(tables.utility_keywords)


def _extension_in(attribute: str) -> RulePredicate:
    def predicate(subject: FileSubject, tables: ClassifierTables) -> bool:
        return subject.extension in getattr(tables, attribute)

    return predicate


def _is_module(subject: FileSubject, tables: ClassifierTables) -> bool:
    return subject.language in tables.programming_languages


# First match wins; order encodes priority between overlapping rules.
DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule("config", _is_config, SemanticType.CONFIG),
    ClassificationRule("readme", _is_readme, SemanticType.README),
    ClassificationRule("documentation", _is_documentation, SemanticType.DOCUMENTATION),
    ClassificationRule("test", _is_test, SemanticType.TEST),
    ClassificationRule("controller", _mentions("controller"), SemanticType.CONTROLLER),
    ClassificationRule("service", _mentions("service"), SemanticType.SERVICE),
    ClassificationRule("model", _mentions("model"), SemanticType.MODEL),
    ClassificationRule("component", _is_component, SemanticType.COMPONENT),
    ClassificationRule("utility", _is_utility, SemanticType.UTILITY),
    ClassificationRule("style", _extension_in("style_extensions"), SemanticType.STYLE),
    ClassificationRule("template", _extension_in("template_extensions"), SemanticType.TEMPLATE),
    ClassificationRule("script", _extension_in("script_extensions"), SemanticType.SCRIPT),
    ClassificationRule("data", _extension_in("data_extensions"), SemanticType.DATA),
    ClassificationRule("module", _is_module, SemanticType.MODULE),
)


@dataclass(frozen=True)
class Classification:
    language: str
    semantic_type: SemanticType
    rule: str = "fallback"


@dataclass
class FileClassifier:
    """Assigns a language and a semantic type using an ordered rule table."""

    tables: ClassifierTables = DEFAULT_TABLES
    rules: Tuple[ClassificationRule, ...] = field(default=DEFAULT_RULES)

    def language_for(self, path: str) -> str:
        return FileSubject.from_path(path, self.tables).language

    def is_supported(self, path: str) -> bool:
        """Return True for indexable extensions or allow-listed important file names."""
        subject = FileSubject.from_path(path, self.tables)
        if subject.extension in self.tables.supported_extensions:
            return True
        return any(important in subject.name for important in self.tables.important_filenames)

    def classify(self, path: str, content: Optional[str] = None) -> Classification:
        subject = FileSubject.from_path(path, self.tables)
        for rule in self.rules:
            if rule.applies(subject, self.tables):
                semantic_type = rule.semantic_type
                if semantic_type is SemanticType.MODULE and content and _declares_own_class(subject, content):
                    return Classification(subject.language, SemanticType.CLASS, "class")
                return Classification(subject.language, semantic_type, rule.name)
        return Classification(subject.language, SemanticType.OTHER)


def extension_of(name: str) -> str:
    """Return the lower-cased extension of a file name without the dot."""
    suffix = PurePosixPath(name).suffix
    return suffix[1:].lower() if suffix else ""


def _declares_own_class(subject: FileSubject, content: str) -> bool:
    if not subject.stem:
        return False
    pattern = re.compile(rf"\bclass\s+{re.escape(subject.stem)}\b", re.IGNORECASE)
    return bool(pattern.search(content))


__all__ = [
    "Classification",
    "ClassificationRule",
    "ClassifierTables",
    "DEFAULT_RULES",
    "DEFAULT_TABLES",
    "FileClassifier",
    "FileSubject",
    "IMPORTANT_FILENAMES",
    "LANGUAGE_BY_EXTENSION",
    "PROGRAMMING_LANGUAGES",
    "UNKNOWN_LANGUAGE",
    "extension_of",
]
