"""CLI entrypoints for indexgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import DEFAULT_CONFIG_NAME, ConfigError, load_config
from .logging import configure_logging
from .orchestrator import DEFAULT_OUTPUT_DIR, ExportResult, Orchestrator
from .renderers.common import MINDMAP_FORMATS, RenderError
from .walker import IndexingError

BYTES_PER_MB = 1024 * 1024


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    _add_verbose_option(parser, suppress_default=True)
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_NAME,
        help=f"Path to the configuration file (defaults to {DEFAULT_CONFIG_NAME}).",
    )
    parser.add_argument(
        "-d",
        "--dry",
        action="store_true",
        help="Print the rendered output instead of writing files; skips text generation.",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory (defaults to {DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip text generation through the local model runtime.",
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError("value must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="indexgen",
        description="Index a source tree and export mind maps and structured documentation.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    mindmap_parser = subparsers.add_parser(
        "export-mindmap",
        help="Export a project mind map (markdown, mermaid or dot).",
    )
    _add_common_options(mindmap_parser)
    mindmap_parser.add_argument(
        "--format",
        default="markdown",
        choices=[fmt.value for fmt in MINDMAP_FORMATS],
        help="Mind map output format (defaults to markdown).",
    )
    mindmap_parser.add_argument(
        "--max-depth",
        type=_positive_int,
        default=10,
        help="Maximum folder depth shown in the structure tree.",
    )
    mindmap_parser.add_argument(
        "--types-only",
        default=None,
        help="Comma-separated semantic types to include, e.g. service,controller.",
    )

    full_parser = subparsers.add_parser(
        "export-full",
        help="Export full documentation, an API spec and optional JSON/PDF outputs.",
    )
    _add_common_options(full_parser)
    full_parser.add_argument(
        "--json",
        action="store_true",
        help="Also write project_data.json.",
    )
    full_parser.add_argument(
        "--pdf",
        action="store_true",
        help="Also write full_documentation.pdf (requires pandoc).",
    )
    full_parser.add_argument(
        "--max-size",
        type=_positive_int,
        default=10,
        help="Maximum size of one documentation file in MB before splitting (defaults to 10).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for indexgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    orchestrator = Orchestrator()
    try:
        config = load_config(Path(args.config))
        if args.command == "export-mindmap":
            types_only = [item.strip() for item in (args.types_only or "").split(",") if item.strip()]
            result = orchestrator.export_mindmap(
                config,
                args.output,
                args.format,
                max_depth=args.max_depth,
                types_only=types_only or None,
                use_ai=not args.no_ai,
                dry_run=bool(args.dry),
            )
        elif args.command == "export-full":
            result = orchestrator.export_full(
                config,
                args.output,
                max_size=args.max_size * BYTES_PER_MB,
                json_export=bool(args.json),
                pdf=bool(args.pdf),
                use_ai=not args.no_ai,
                dry_run=bool(args.dry),
            )
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ConfigError as exc:
        parser.exit(1, f"Configuration error: {exc}\n")
    except IndexingError as exc:
        parser.exit(1, f"Indexing failed: {exc}\n")
    except RenderError as exc:
        parser.exit(1, f"Export failed: {exc}\n")
    except OSError as exc:
        parser.exit(1, f"indexgen {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    _report(result)


def _report(result: ExportResult) -> None:
    metadata = result.index.metadata
    if result.dry_run:
        for name, content in result.outputs.items():
            print(f"===== {name} (dry run) =====")
            print(content)
    else:
        for path in result.written:
            print(f"Wrote {_relativize(path)}")
    print(f"Indexed {metadata.total_files} files in {metadata.total_folders} folders")
    if metadata.total_files == 0:
        print("No files found to index. Check your include/exclude patterns.")
    if result.warnings:
        print(f"{len(result.warnings)} warning(s); run with --verbose for details.")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
