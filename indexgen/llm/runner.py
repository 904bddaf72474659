"""Adapter around a local Ollama runtime."""

from __future__ import annotations

import ipaddress
import json
import os
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen


@dataclass
class LLMRequest:
    """Represents a single generation request for the local runtime."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: str
    request_timeout: Optional[float]


class LLMRunner:
    """Sends prompts to Ollama's non-streaming ``/api/generate`` endpoint."""

    DEFAULT_MODEL = "llama2"
    DEFAULT_BASE_URL = "http://localhost:11434"
    ENV_MODEL_KEYS = ("INDEXGEN_LLM_MODEL", "OLLAMA_MODEL")
    ENV_BASE_URL_KEYS = ("INDEXGEN_LLM_BASE_URL", "OLLAMA_HOST")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        temperature: Optional[float] = 0.7,
        max_tokens: Optional[int] = 512,
        request_timeout: Optional[float] = 30.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.model = self._resolve_model(model)
        self.base_url = self._resolve_base_url(base_url)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._runner = runner or self._http_runner

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Send the prompt to the configured model and return the response text."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            base_url=self.base_url,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    def list_models(self) -> List[str]:
        """Return model names the runtime reports through ``/api/tags``."""
        payload = self._get_json(f"{self.base_url}/api/tags", timeout=5.0)
        models = payload.get("models")
        if not isinstance(models, list):
            return []
        names: List[str] = []
        for entry in models:
            if isinstance(entry, dict) and isinstance(entry.get("name"), str):
                names.append(entry["name"])
        return names

    @staticmethod
    def _http_runner(request: LLMRequest) -> str:
        endpoint = f"{request.base_url}/api/generate"
        options: dict[str, object] = {}
        if request.temperature is not None:
            options["temperature"] = request.temperature
        if request.max_tokens is not None:
            options["num_predict"] = request.max_tokens
        payload: dict[str, object] = {
            "model": request.model,
            "prompt": request.prompt,
            "stream": False,
            "options": options,
        }
        if request.system:
            payload["system"] = request.system

        http_request = Request(
            endpoint,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        response_payload = LLMRunner._send(http_request, request.request_timeout or 30.0)

        content = response_payload.get("response")
        if not isinstance(content, str) or not content.strip():
            raise RuntimeError("Ollama returned an empty response")
        return content.strip()

    @staticmethod
    def _send(http_request: Request, timeout: float) -> dict:
        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on runtime
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise RuntimeError(f"Ollama API error {exc.code}: {message}") from exc
        except URLError as exc:
            raise RuntimeError(f"Ollama request failed: {exc.reason}") from exc
        except (TimeoutError, OSError) as exc:
            raise RuntimeError(f"Ollama request failed: {exc}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RuntimeError("Ollama returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise RuntimeError("Ollama returned an unexpected payload")
        return payload

    def _get_json(self, url: str, *, timeout: float) -> dict:
        return self._send(Request(url, method="GET"), timeout)

    def _resolve_model(self, model: str | None) -> str:
        if model:
            return model
        return self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL

    def _resolve_base_url(self, base_url: str | None) -> str:
        candidate = base_url or self._first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        if "://" not in candidate:
            candidate = f"http://{candidate}"
        return ensure_local_url(candidate)

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


def ensure_local_url(url: str) -> str:
    """Return ``url`` without a trailing slash; raise ``RuntimeError`` for remote hosts."""
    normalized = url.rstrip("/")
    host = urlparse(normalized).hostname
    if host is None or _is_local_host(host):
        return normalized
    raise RuntimeError(
        f"Remote base_url '{url}' is not permitted. Configure a local Ollama runtime."
    )


def _is_local_host(host: str) -> bool:
    lowered = host.lower()
    if lowered in {"localhost", "127.0.0.1", "0.0.0.0", "::1", "host.docker.internal"}:
        return True
    if lowered.endswith(".local") or lowered.endswith(".localdomain"):
        return True
    try:
        ip = ipaddress.ip_address(lowered)
    except ValueError:
        return False
    return ip.is_loopback or ip.is_private
