"""Configuration loading and validation for indexgen (indexgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .llm.runner import ensure_local_url

DEFAULT_CONFIG_NAME = "indexgen.yml"

DEFAULT_EXCLUDES: Tuple[str, ...] = (
    "node_modules",
    "vendor",
    "dist",
    "build",
    ".git",
    ".svn",
    ".hg",
    "coverage",
    "tmp",
    "temp",
)

VALID_NATURAL_LANGUAGES: Tuple[str, ...] = ("en", "fr", "es", "de", "it", "pt", "ru", "zh", "ja")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or fails validation."""


@dataclass
class ProjectConfig:
    root_path: Path
    languages: List[str] = field(default_factory=list)
    framework: Optional[str] = None
    natural_language: str = "en"
    description: str = ""


@dataclass
class LLMConfig:
    """Local model runtime settings (the ``llm`` or legacy ``ollama`` section)."""

    enabled: bool = True
    model: str = "llama2"
    base_url: str = "http://localhost:11434"
    temperature: float = 0.7
    max_tokens: int = 512
    request_timeout: float = 30.0
    batch_size: int = 5
    batch_delay: float = 1.0


@dataclass
class GeneralConfig:
    use_gitignore: bool = True
    max_file_size: int = 1024 * 1024
    follow_symlinks: bool = False
    ignore_hidden: bool = True
    max_depth: int = 10
    concurrency: int = 8


@dataclass
class AnalyzerConfig:
    """Analyzer enablement; ``None`` runs every discovered analyzer."""

    enabled: Optional[List[str]] = None


@dataclass
class IndexConfig:
    """Validated settings for one indexing run."""

    project: ProjectConfig
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDES))
    llm: LLMConfig = field(default_factory=LLMConfig)
    general: GeneralConfig = field(default_factory=GeneralConfig)
    analyzers: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    source: Optional[Path] = None


def load_config(config_path: Path) -> IndexConfig:
    """Load, merge with defaults and validate a configuration file."""
    config_file = _resolve_config_path(Path(config_path))
    if not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_file}")

    data = _read_config(config_file)
    config = config_from_mapping(data, base_dir=config_file.parent)
    config.source = config_file
    return config


def config_from_mapping(data: Mapping[str, Any], *, base_dir: Path | None = None) -> IndexConfig:
    """Build a validated configuration from already-parsed data.

    Relative ``rootPath`` values resolve against ``base_dir`` (the directory of
    the configuration file when loading from disk).
    """
    if not isinstance(data, Mapping):
        raise ConfigError("Configuration must contain a mapping at the root")
    base = (base_dir or Path.cwd()).expanduser().resolve()

    project_data = _section(data, "project")
    raw_root = _as_str(_get(project_data, "rootPath", "root_path"))
    if not raw_root:
        raise ConfigError("Project root path is required (project.rootPath)")
    root_path = Path(raw_root).expanduser()
    if not root_path.is_absolute():
        root_path = base / root_path
    root_path = root_path.resolve()

    languages_value = project_data.get("languages")
    if not isinstance(languages_value, list) or not _as_str_list(languages_value):
        raise ConfigError("At least one programming language must be specified (project.languages)")

    natural_language = _as_str(_get(project_data, "naturalLanguage", "natural_language")) or "en"
    if natural_language not in VALID_NATURAL_LANGUAGES:
        raise ConfigError(
            f"Invalid natural language: {natural_language}. "
            f"Valid options: {', '.join(VALID_NATURAL_LANGUAGES)}"
        )

    project = ProjectConfig(
        root_path=root_path,
        languages=_as_str_list(languages_value),
        framework=_as_str(project_data.get("framework")) or None,
        natural_language=natural_language,
        description=_as_str(project_data.get("description")) or "",
    )

    include = _pattern_list(data, "include")
    include = [_relative_pattern(pattern, root_path) for pattern in include]
    exclude = list(DEFAULT_EXCLUDES)
    for pattern in _pattern_list(data, "exclude"):
        if pattern not in exclude:
            exclude.append(pattern)

    analyzers_data = _section(data, "analyzers")
    enabled = analyzers_data.get("enabled")

    return IndexConfig(
        project=project,
        include=include,
        exclude=exclude,
        llm=_llm_config(data),
        general=_general_config(data),
        analyzers=AnalyzerConfig(enabled=_as_str_list(enabled) if enabled is not None else None),
    )


def _llm_config(data: Mapping[str, Any]) -> LLMConfig:
    llm_data = _section(data, "llm") or _section(data, "ollama")
    defaults = LLMConfig()

    temperature = _number(llm_data, ("temperature",), defaults.temperature, float)
    if not 0 <= temperature <= 2:
        raise ConfigError("llm.temperature must be between 0 and 2")
    max_tokens = _number(llm_data, ("maxTokens", "max_tokens"), defaults.max_tokens, int)
    if not 1 <= max_tokens <= 4096:
        raise ConfigError("llm.maxTokens must be between 1 and 4096")
    request_timeout = _number(llm_data, ("requestTimeout", "request_timeout"), defaults.request_timeout, float)
    batch_size = _number(llm_data, ("batchSize", "batch_size"), defaults.batch_size, int)
    batch_delay = _number(llm_data, ("batchDelay", "batch_delay"), defaults.batch_delay, float)
    if request_timeout <= 0 or batch_size < 1 or batch_delay < 0:
        raise ConfigError("llm.requestTimeout and llm.batchSize must be positive, llm.batchDelay non-negative")

    base_url = _as_str(_get(llm_data, "baseUrl", "base_url")) or defaults.base_url
    if "://" not in base_url:
        base_url = f"http://{base_url}"
    try:
        base_url = ensure_local_url(base_url)
    except RuntimeError as exc:
        raise ConfigError(f"llm.baseUrl must point at a local runtime: {exc}") from exc

    enabled = _as_bool(llm_data.get("enabled"))
    return LLMConfig(
        enabled=defaults.enabled if enabled is None else enabled,
        model=_as_str(llm_data.get("model")) or defaults.model,
        base_url=base_url,
        temperature=temperature,
        max_tokens=max_tokens,
        request_timeout=request_timeout,
        batch_size=batch_size,
        batch_delay=batch_delay,
    )


def _general_config(data: Mapping[str, Any]) -> GeneralConfig:
    general_data = _section(data, "general")
    defaults = GeneralConfig()

    max_file_size = _number(general_data, ("maxFileSize", "max_file_size"), defaults.max_file_size, int)
    max_depth = _number(general_data, ("maxDepth", "max_depth"), defaults.max_depth, int)
    concurrency = _number(general_data, ("concurrency",), defaults.concurrency, int)
    if max_file_size < 1:
        raise ConfigError("general.maxFileSize must be a positive number of bytes")
    if max_depth < 0:
        raise ConfigError("general.maxDepth must not be negative")
    if concurrency < 1:
        raise ConfigError("general.concurrency must be at least 1")

    return GeneralConfig(
        use_gitignore=_flag(general_data, ("useGitignore", "use_gitignore"), defaults.use_gitignore),
        max_file_size=max_file_size,
        follow_symlinks=_flag(general_data, ("followSymlinks", "follow_symlinks"), defaults.follow_symlinks),
        ignore_hidden=_flag(general_data, ("ignoreHidden", "ignore_hidden"), defaults.ignore_hidden),
        max_depth=max_depth,
        concurrency=concurrency,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / DEFAULT_CONFIG_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        raise ConfigError(f"{path.name} is empty")
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _relative_pattern(pattern: str, root: Path) -> str:
    """Turn absolute include paths inside the project into root-relative patterns."""
    candidate = Path(pattern)
    if not candidate.is_absolute():
        return pattern
    try:
        relative = candidate.resolve().relative_to(root)
    except ValueError:
        return pattern
    return relative.as_posix() or "."


def _section(data: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    if value is not None and not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return _as_dict(value)


def _pattern_list(data: Mapping[str, Any], name: str) -> List[str]:
    value = data.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"'{name}' must be a list of patterns")
    return _as_str_list(value)


def _get(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _number(data: Mapping[str, Any], keys: Sequence[str], default, kind):
    raw = _get(data, *keys)
    if raw is None:
        return default
    value = _as_int(raw) if kind is int else _as_float(raw)
    if value is None or isinstance(raw, bool):
        raise ConfigError(f"'{keys[0]}' must be a number, got {raw!r}")
    return value


def _flag(data: Mapping[str, Any], keys: Sequence[str], default: bool) -> bool:
    raw = _get(data, *keys)
    if raw is None:
        return default
    value = _as_bool(raw)
    if value is None:
        raise ConfigError(f"'{keys[0]}' must be true or false, got {raw!r}")
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool)) and str(item)]
    return []


__all__ = [
    "AnalyzerConfig",
    "ConfigError",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_EXCLUDES",
    "GeneralConfig",
    "IndexConfig",
    "LLMConfig",
    "ProjectConfig",
    "VALID_NATURAL_LANGUAGES",
    "config_from_mapping",
    "load_config",
]
