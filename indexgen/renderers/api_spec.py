"""Internal API specification rendered as YAML."""

from __future__ import annotations

from typing import Dict

import yaml

from .common import RenderOptions, filter_files, project_title, timestamp
from ..models import ProjectIndex

SPEC_VERSION = "1.0.0"


def build_api_spec(index: ProjectIndex, options: RenderOptions | None = None) -> Dict[str, object]:
    """Return the specification as plain data keyed by component (file) name.

    Only files whose extracted metadata lists classes or functions become
    components. A repeated file name falls back to the relative path as key.
    """
    options = options or RenderOptions()
    components: Dict[str, object] = {}
    for file in filter_files(index.files, options):
        metadata = file.metadata
        if metadata is None or not (metadata.classes or metadata.functions):
            continue
        key = file.name if file.name not in components else file.relative_path
        components[key] = {
            "path": file.relative_path,
            "type": file.semantic_type.value,
            "language": file.language,
            "complexity": file.complexity,
            "description": file.description,
            "classes": list(metadata.classes),
            "functions": list(metadata.functions),
            "exports": list(metadata.exports),
            "dependencies": list(metadata.dependencies),
        }

    return {
        "info": {
            "title": f"{project_title(index)} Internal API Specification",
            "version": SPEC_VERSION,
            "description": "Generated internal API specification",
            "generatedAt": timestamp(index),
        },
        "project": {
            "path": index.project.root_path,
            "languages": list(index.metadata.languages),
            "frameworks": list(index.analysis.frameworks),
            "architecture": list(index.analysis.architecture_patterns),
        },
        "components": components,
    }


def render_api_spec(index: ProjectIndex, options: RenderOptions | None = None) -> str:
    return yaml.safe_dump(
        build_api_spec(index, options),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        indent=2,
    )


__all__ = ["build_api_spec", "render_api_spec"]
