"""Tests for the local LLM runner."""

from __future__ import annotations

import json
from urllib.error import URLError

import pytest

from indexgen.llm.runner import LLMRunner


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def read(self):
        return json.dumps(self._payload).encode("utf-8")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_llm_runner_constructs_request() -> None:
    captured = {}

    def fake_runner(request):
        captured["prompt"] = request.prompt
        captured["system"] = request.system
        captured["model"] = request.model
        captured["temperature"] = request.temperature
        captured["max_tokens"] = request.max_tokens
        captured["base_url"] = request.base_url
        captured["request_timeout"] = request.request_timeout
        return "response"

    runner = LLMRunner(
        model="custom-model",
        base_url="http://localhost:11434/",
        temperature=0.15,
        max_tokens=256,
        request_timeout=42.0,
        runner=fake_runner,
    )
    result = runner.run("Hello world", system="system message")

    assert result == "response"
    assert captured == {
        "prompt": "Hello world",
        "system": "system message",
        "model": "custom-model",
        "temperature": 0.15,
        "max_tokens": 256,
        "base_url": "http://localhost:11434",
        "request_timeout": 42.0,
    }


def test_llm_runner_http_posts_generate_payload(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["headers"] = {k.lower(): v for k, v in request.header_items()}
        captured["payload"] = json.loads(request.data.decode("utf-8"))
        captured["timeout"] = timeout
        return FakeResponse({"response": "  Handles user routes.  ", "done": True})

    monkeypatch.setattr("indexgen.llm.runner.urlopen", fake_urlopen)

    runner = LLMRunner(
        model="codellama",
        base_url="http://127.0.0.1:11434",
        temperature=0.05,
        max_tokens=128,
        request_timeout=25.0,
    )
    result = runner.run("Describe this file.", system="Be brief.")

    assert result == "Handles user routes."
    assert captured["url"] == "http://127.0.0.1:11434/api/generate"
    assert captured["headers"]["content-type"] == "application/json"
    assert captured["payload"] == {
        "model": "codellama",
        "prompt": "Describe this file.",
        "stream": False,
        "options": {"temperature": 0.05, "num_predict": 128},
        "system": "Be brief.",
    }
    assert captured["timeout"] == 25.0


def test_llm_runner_rejects_empty_response(monkeypatch) -> None:
    monkeypatch.setattr(
        "indexgen.llm.runner.urlopen", lambda request, timeout=None: FakeResponse({"response": "  "})
    )

    with pytest.raises(RuntimeError, match="empty response"):
        LLMRunner(model="llama2").run("prompt")


def test_llm_runner_wraps_connection_errors(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise URLError("connection refused")

    monkeypatch.setattr("indexgen.llm.runner.urlopen", fake_urlopen)

    with pytest.raises(RuntimeError, match="connection refused"):
        LLMRunner(model="llama2").run("prompt")


def test_llm_runner_lists_models(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["method"] = request.get_method()
        return FakeResponse({"models": [{"name": "llama2:latest"}, {"name": "codellama"}, {"size": 1}]})

    monkeypatch.setattr("indexgen.llm.runner.urlopen", fake_urlopen)

    assert LLMRunner(model="llama2").list_models() == ["llama2:latest", "codellama"]
    assert captured == {"url": "http://localhost:11434/api/tags", "method": "GET"}


def test_llm_runner_resolves_environment_defaults(monkeypatch) -> None:
    monkeypatch.delenv("INDEXGEN_LLM_MODEL", raising=False)
    monkeypatch.setenv("OLLAMA_MODEL", "mistral")
    monkeypatch.delenv("INDEXGEN_LLM_BASE_URL", raising=False)
    monkeypatch.setenv("OLLAMA_HOST", "127.0.0.1:11500")

    runner = LLMRunner()

    assert runner.model == "mistral"
    assert runner.base_url == "http://127.0.0.1:11500"


def test_llm_runner_rejects_remote_hosts() -> None:
    with pytest.raises(RuntimeError, match="not permitted"):
        LLMRunner(model="llama2", base_url="https://api.example.com")

    assert LLMRunner(model="llama2", base_url="http://192.168.1.20:11434").base_url == "http://192.168.1.20:11434"
