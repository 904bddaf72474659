"""Tests for analyzer discovery utilities."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from indexgen.analyzers import Analyzer, ArchitectureAnalyzer, discover_analyzers


class DummyAnalyzer(Analyzer):
    """Test analyzer used for plugin discovery validation."""

    name = "dummy"

    def analyze(self, files, folders, analysis):  # pragma: no cover - unused
        return None


def test_discover_analyzers_returns_builtin_analyzers() -> None:
    analyzers = discover_analyzers()
    names = [analyzer.name for analyzer in analyzers]
    assert names[:4] == ["architecture", "signals", "coverage", "dependencies"]


def test_discover_analyzers_respects_enabled_filter() -> None:
    analyzers = discover_analyzers(["Architecture"])
    assert len(analyzers) == 1
    assert isinstance(analyzers[0], ArchitectureAnalyzer)


def test_discover_analyzers_loads_entry_points(monkeypatch) -> None:
    dummy_entry = SimpleNamespace(
        name="dummy",
        load=lambda: DummyAnalyzer,
    )

    class DummyEntryPoints(list):
        def select(self, **kwargs):
            if kwargs.get("group") == "indexgen.analyzers":
                return self
            return []

    monkeypatch.setattr(
        "indexgen.analyzers.metadata.entry_points",
        lambda: DummyEntryPoints([dummy_entry]),
        raising=False,
    )

    analyzers = discover_analyzers(["dummy"])
    assert len(analyzers) == 1
    assert isinstance(analyzers[0], DummyAnalyzer)


def test_discover_analyzers_rejects_non_analyzer_entry_points(monkeypatch) -> None:
    bad_entry = SimpleNamespace(name="bad", load=lambda: object)

    class DummyEntryPoints(list):
        def select(self, **kwargs):
            return self

    monkeypatch.setattr(
        "indexgen.analyzers.metadata.entry_points",
        lambda: DummyEntryPoints([bad_entry]),
        raising=False,
    )

    with pytest.raises(TypeError):
        discover_analyzers(["bad"])


def test_discover_analyzers_raises_for_unknown_name() -> None:
    with pytest.raises(ValueError):
        discover_analyzers(["does-not-exist"])
