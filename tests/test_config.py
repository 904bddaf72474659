"""Tests for indexgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from indexgen.config import (
    DEFAULT_EXCLUDES,
    ConfigError,
    IndexConfig,
    LLMConfig,
    config_from_mapping,
    load_config,
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_applies_defaults(tmp_path: Path) -> None:
    _write(
        tmp_path / "indexgen.yml",
        """
project:
  rootPath: .
  languages: [javascript]
""",
    )

    config = load_config(tmp_path)

    assert isinstance(config, IndexConfig)
    assert config.source == (tmp_path / "indexgen.yml").resolve()
    assert config.project.root_path == tmp_path.resolve()
    assert config.project.natural_language == "en"
    assert config.project.framework is None
    assert config.include == []
    assert config.exclude == list(DEFAULT_EXCLUDES)
    assert config.llm == LLMConfig()
    assert config.general.use_gitignore is True
    assert config.general.max_file_size == 1024 * 1024
    assert config.general.max_depth == 10
    assert config.analyzers.enabled is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    config_file = _write(
        tmp_path / "custom.yml",
        f"""
project:
  rootPath: project
  languages: [python, typescript]
  framework: fastapi
  naturalLanguage: fr
  description: Billing service
include:
  - {project / "src"}
  - "lib/**"
exclude:
  - "*.log"
  - node_modules
llm:
  enabled: false
  model: codellama
  baseUrl: http://localhost:11500
  temperature: 0.2
  maxTokens: 256
  batchSize: 2
  batchDelay: 0
general:
  useGitignore: "no"
  maxFileSize: 2048
  followSymlinks: true
  ignoreHidden: false
  maxDepth: 3
analyzers:
  enabled: [architecture, signals]
""",
    )

    config = load_config(config_file)

    assert config.project.root_path == project.resolve()
    assert config.project.languages == ["python", "typescript"]
    assert config.project.framework == "fastapi"
    assert config.project.natural_language == "fr"
    assert config.project.description == "Billing service"
    assert config.include == ["src", "lib/**"]
    assert config.exclude == [*DEFAULT_EXCLUDES, "*.log"]
    assert config.llm.enabled is False
    assert config.llm.model == "codellama"
    assert config.llm.base_url == "http://localhost:11500"
    assert config.llm.temperature == pytest.approx(0.2)
    assert config.llm.max_tokens == 256
    assert config.llm.batch_size == 2
    assert config.llm.batch_delay == 0
    assert config.general.use_gitignore is False
    assert config.general.max_file_size == 2048
    assert config.general.follow_symlinks is True
    assert config.general.ignore_hidden is False
    assert config.general.max_depth == 3
    assert config.analyzers.enabled == ["architecture", "signals"]


def test_legacy_ollama_section_is_accepted(tmp_path: Path) -> None:
    config = config_from_mapping(
        {
            "project": {"root_path": str(tmp_path), "languages": ["go"]},
            "ollama": {"model": "mistral", "max_tokens": 64},
        }
    )

    assert config.project.root_path == tmp_path.resolve()
    assert config.llm.model == "mistral"
    assert config.llm.max_tokens == 64


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "text",
    ["", "- just\n- a list\n", "project: [unclosed\n"],
)
def test_unreadable_config_raises(tmp_path: Path, text: str) -> None:
    config_file = _write(tmp_path / "indexgen.yml", text)

    with pytest.raises(ConfigError):
        load_config(config_file)


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"project": {"languages": ["python"]}}, "root path is required"),
        ({"project": {"rootPath": "."}}, "language"),
        ({"project": {"rootPath": ".", "languages": []}}, "language"),
        ({"project": {"rootPath": ".", "languages": ["python"], "naturalLanguage": "xx"}}, "Invalid natural language"),
        ({"project": {"rootPath": ".", "languages": ["python"]}, "llm": {"temperature": 3}}, "temperature"),
        ({"project": {"rootPath": ".", "languages": ["python"]}, "llm": {"maxTokens": 0}}, "maxTokens"),
        ({"project": {"rootPath": ".", "languages": ["python"]}, "llm": {"maxTokens": "many"}}, "must be a number"),
        ({"project": {"rootPath": ".", "languages": ["python"]}, "general": {"maxFileSize": 0}}, "maxFileSize"),
        ({"project": {"rootPath": ".", "languages": ["python"]}, "general": {"concurrency": 0}}, "concurrency"),
        ({"project": {"rootPath": ".", "languages": ["python"]}, "general": {"followSymlinks": "maybe"}}, "true or false"),
        ({"project": {"rootPath": ".", "languages": ["python"]}, "exclude": "dist"}, "list of patterns"),
        ({"project": "elsewhere"}, "must be a mapping"),
        ({"project": {"rootPath": ".", "languages": ["python"]}, "llm": {"baseUrl": "https://api.example.com"}}, "local runtime"),
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, data: dict, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        config_from_mapping(data, base_dir=tmp_path)


def test_nonexistent_root_is_left_to_the_walker(tmp_path: Path) -> None:
    config = config_from_mapping(
        {"project": {"rootPath": "missing", "languages": ["python"]}},
        base_dir=tmp_path,
    )

    assert config.project.root_path == (tmp_path / "missing").resolve()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("localhost:11500", "http://localhost:11500"),
        ("http://192.168.1.20:11434/", "http://192.168.1.20:11434"),
    ],
)
def test_local_base_urls_are_normalised(tmp_path: Path, value: str, expected: str) -> None:
    config = config_from_mapping(
        {"project": {"rootPath": ".", "languages": ["python"]}, "llm": {"baseUrl": value}},
        base_dir=tmp_path,
    )

    assert config.llm.base_url == expected
