"""Tests for indexgen.classifier."""

from __future__ import annotations

import pytest

from indexgen.classifier import LANGUAGE_BY_EXTENSION, ClassifierTables, FileClassifier, extension_of
from indexgen.models import SemanticType


@pytest.fixture
def classifier() -> FileClassifier:
    return FileClassifier()


@pytest.mark.parametrize(
    ("path", "language"),
    [
        ("src/App.JS", "javascript"),
        ("src/view.tsx", "typescript"),
        ("app/Http/Kernel.php", "php"),
        ("main.PY", "python"),
        ("Makefile", "unknown"),
    ],
)
def test_language_lookup_is_case_insensitive(classifier: FileClassifier, path: str, language: str) -> None:
    assert classifier.classify(path).language == language
    assert classifier.language_for(path) == language


@pytest.mark.parametrize(
    ("path", "semantic_type"),
    [
        ("package.json", SemanticType.CONFIG),
        ("app/settings.py", SemanticType.CONFIG),
        ("README.md", SemanticType.README),
        ("docs/guide.md", SemanticType.DOCUMENTATION),
        ("LICENSE", SemanticType.DOCUMENTATION),
        ("tests/user.test.js", SemanticType.TEST),
        ("src/controllers/UserController.js", SemanticType.CONTROLLER),
        ("src/services/user_service.py", SemanticType.SERVICE),
        ("src/models/User.js", SemanticType.MODEL),
        ("src/Button.jsx", SemanticType.COMPONENT),
        ("src/utils/format.js", SemanticType.UTILITY),
        ("styles/main.css", SemanticType.STYLE),
        ("views/index.html", SemanticType.TEMPLATE),
        ("bin/deploy.sh", SemanticType.SCRIPT),
        ("fixtures/users.csv", SemanticType.DATA),
        ("src/app.py", SemanticType.MODULE),
    ],
)
def test_semantic_type_rules(classifier: FileClassifier, path: str, semantic_type: SemanticType) -> None:
    assert classifier.classify(path).semantic_type is semantic_type


def test_first_matching_rule_wins(classifier: FileClassifier) -> None:
    # "test" is checked before "controller", "config" before everything else.
    assert classifier.classify("tests/controllers/user_controller.py").semantic_type is SemanticType.TEST
    assert classifier.classify("src/services/config_service.js").semantic_type is SemanticType.CONFIG


def test_content_upgrades_module_to_class_when_file_declares_its_class(classifier: FileClassifier) -> None:
    content = "class Parser:\n    def parse(self):\n        return 1\n"

    assert classifier.classify("src/Parser.py", content).semantic_type is SemanticType.CLASS
    assert classifier.classify("src/Parser.py").semantic_type is SemanticType.MODULE
    assert classifier.classify("src/other.py", content).semantic_type is SemanticType.MODULE


def test_unknown_binary_files_are_not_supported(classifier: FileClassifier) -> None:
    assert not classifier.is_supported("assets/logo.png")
    assert classifier.is_supported("Dockerfile")
    assert classifier.is_supported("CHANGELOG")
    assert classifier.is_supported("src/app.ts")


def test_non_programming_files_fall_back_to_other(classifier: FileClassifier) -> None:
    assert classifier.classify("notes/Dockerfile").semantic_type is SemanticType.CONFIG
    assert classifier.classify("Procfile").semantic_type is SemanticType.OTHER


def test_extension_of() -> None:
    assert extension_of("Archive.TAR.GZ") == "gz"
    assert extension_of("Makefile") == ""


def test_tables_default_to_shared_lookup_and_accept_fixtures() -> None:
    assert ClassifierTables().language_by_extension is LANGUAGE_BY_EXTENSION

    tables = ClassifierTables(language_by_extension={"foo": "foolang"})
    assert FileClassifier(tables=tables).language_for("src/main.foo") == "foolang"
