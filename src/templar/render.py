"""Render derived documents with pandoc."""

from __future__ import annotations

import logging
import os
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol

from pydantic import BaseModel, Field

from templar.config import TEMPLAR_OUTPUT_FORMAT, TEMPLAR_PANDOC_PATH
from templar.exceptions import RenderError

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "html": ".html",
    "html4": ".html",
    "html5": ".html",
    "latex": ".tex",
    "beamer": ".tex",
    "pdf": ".pdf",
    "docx": ".docx",
    "odt": ".odt",
    "epub": ".epub",
    "markdown": ".md",
    "gfm": ".md",
    "commonmark": ".md",
    "rst": ".rst",
    "plain": ".txt",
}


class RenderSettings(BaseModel):
    """Process-wide renderer settings.

    Attributes:
        to_format: Pandoc output format (``pdf`` lets pandoc pick the engine).
        from_format: Pandoc input format; None lets pandoc guess.
        standalone: If True, produce a complete document with header/footer.
        resource_path: Directories pandoc searches for images and includes.
        extra_args: Additional command-line arguments passed through as-is.
    """

    to_format: str = TEMPLAR_OUTPUT_FORMAT
    from_format: str | None = None
    standalone: bool = True
    resource_path: list[Path] = Field(default_factory=list)
    extra_args: list[str] = Field(default_factory=list)


_settings = RenderSettings()


def get_render_settings() -> RenderSettings:
    """Return a snapshot of the global render settings."""
    return _settings.model_copy(deep=True)


def set_render_settings(settings: RenderSettings) -> None:
    """Replace the global render settings."""
    global _settings
    _settings = settings.model_copy(deep=True)


@contextmanager
def preserved_render_settings() -> Iterator[RenderSettings]:
    """Snapshot the global render settings and restore them on exit.

    Settings are restored even when the body raises.
    """
    snapshot = get_render_settings()
    try:
        yield snapshot
    finally:
        set_render_settings(snapshot)


class Renderer(Protocol):
    """Anything that turns a written document into its final output."""

    def render(self, path: Path) -> Path:
        ...


def output_path_for(path: Path, to_format: str) -> Path:
    """Output file next to ``path`` with the extension for ``to_format``."""
    suffix = _EXTENSIONS.get(to_format, f".{to_format}")
    output = path.with_suffix(suffix)
    if output == path:
        output = path.with_name(f"{path.stem}.out{suffix}")
    return output


class PandocRenderer:
    """Render documents by running the pandoc binary.

    Settings are read from the global render settings at call time unless
    fixed ones are passed in.
    """

    def __init__(
        self,
        pandoc_path: str = TEMPLAR_PANDOC_PATH,
        settings: RenderSettings | None = None,
    ) -> None:
        self.pandoc_path = pandoc_path
        self._settings = settings

    @property
    def settings(self) -> RenderSettings:
        return self._settings or get_render_settings()

    def build_command(self, path: Path, output: Path) -> list[str]:
        settings = self.settings
        command = [self.pandoc_path, path.name, "-o", output.name]
        if settings.to_format != "pdf":
            command.extend(["-t", settings.to_format])
        if settings.from_format:
            command.extend(["-f", settings.from_format])
        if settings.standalone:
            command.append("--standalone")
        if settings.resource_path:
            joined = os.pathsep.join(str(p) for p in settings.resource_path)
            command.append(f"--resource-path={joined}")
        command.extend(settings.extra_args)
        return command

    def render(self, path: Path) -> Path:
        """Render ``path`` and return the output file's path.

        Uses subprocess with an explicit cwd so relative includes resolve
        against the document's directory.

        Raises:
            RenderError: If pandoc is not available or rendering fails.
        """
        output = output_path_for(path, self.settings.to_format)
        command = self.build_command(path, output)
        logger.debug("Running %s", " ".join(command))

        try:
            result = subprocess.run(
                command,
                cwd=path.parent.resolve(),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise RenderError(f"pandoc executable not found: {self.pandoc_path}") from exc

        if result.returncode != 0:
            raise RenderError(f"Pandoc rendering failed for {path.name}: {result.stderr}")

        return output
