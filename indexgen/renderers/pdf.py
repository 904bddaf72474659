"""PDF output delegated to the pandoc binary."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

PART_SEPARATOR = "\n\n---\n\n"


def combine_parts(parts: Sequence[str]) -> str:
    """Join split documentation back into the single markdown string pandoc receives."""
    return PART_SEPARATOR.join(parts)


class PandocPdfRenderer:
    """Renders a markdown string to a PDF file through ``pandoc``."""

    def __init__(
        self,
        *,
        executable: str | None = None,
        pdf_engine: str | None = None,
        extra_args: Sequence[str] = (),
    ) -> None:
        self.executable = executable or "pandoc"
        self.pdf_engine = pdf_engine
        self.extra_args = tuple(extra_args)

    def render(self, markdown: str, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        args = [self.executable, "--from", "gfm", "--output", str(output_path)]
        if self.pdf_engine:
            args.append(f"--pdf-engine={self.pdf_engine}")
        args.extend(self.extra_args)

        try:
            subprocess.run(
                args,
                input=markdown,
                check=True,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise RuntimeError(
                f"Unable to locate '{self.executable}'. Install pandoc to enable PDF output."
            ) from exc
        except subprocess.CalledProcessError as exc:
            message = (exc.stderr or "").strip() or (exc.stdout or "").strip() or str(exc.returncode)
            raise RuntimeError(f"PDF generation failed: {message}") from exc
        return output_path


__all__ = ["PART_SEPARATOR", "PandocPdfRenderer", "combine_parts"]
