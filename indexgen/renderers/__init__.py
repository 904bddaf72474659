"""Output renderers for a finished project index.

Every renderer is a pure function of the index and the options; none of them
mutates the index it is given.
"""

from __future__ import annotations

from typing import Dict, List, Union

from .api_spec import build_api_spec, render_api_spec
from .common import (
    MINDMAP_FORMATS,
    RenderError,
    RenderFormat,
    RenderOptions,
)
from .documentation import DocumentationRenderer, TableOfContentsBuilder, split_documentation
from .json_export import dumps_json, export_json
from .mindmap import render_dot, render_markdown, render_mermaid
from .pdf import PandocPdfRenderer, combine_parts
from ..models import ProjectIndex

Rendered = Union[str, List[str], Dict[str, object]]


def render(
    index: ProjectIndex,
    fmt: "str | RenderFormat | None" = None,
    options: RenderOptions | None = None,
) -> Rendered:
    """Render ``index`` in ``fmt``.

    Text formats return a string, ``full`` returns the list of documentation
    parts (one element unless split) and ``json`` returns plain data.
    """
    resolved = RenderFormat.parse(fmt)
    options = options or RenderOptions()
    if resolved is RenderFormat.MARKDOWN:
        return render_markdown(index, options)
    if resolved is RenderFormat.MERMAID:
        return render_mermaid(index, options)
    if resolved is RenderFormat.DOT:
        return render_dot(index, options)
    if resolved is RenderFormat.FULL:
        return DocumentationRenderer().render(index, options)
    if resolved is RenderFormat.API_SPEC:
        return render_api_spec(index, options)
    return export_json(index)


__all__ = [
    "DocumentationRenderer",
    "MINDMAP_FORMATS",
    "PandocPdfRenderer",
    "RenderError",
    "RenderFormat",
    "RenderOptions",
    "TableOfContentsBuilder",
    "build_api_spec",
    "combine_parts",
    "dumps_json",
    "export_json",
    "render",
    "render_api_spec",
    "render_dot",
    "render_markdown",
    "render_mermaid",
    "split_documentation",
]
