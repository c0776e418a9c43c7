"""Write wrapper artifacts to disk.

Each file is written verbatim first, then passed through the formatter.
A successful format overwrites the file; a failed one leaves the
unformatted text in place. Only directory creation and raw writes are
fatal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from tfwrap.domain.errors import WriteError
from tfwrap.infrastructure.formatter import Formatter, NullFormatter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmittedFile:
    """One written artifact and whether a formatter processed it.

    ``formatted`` is False both when formatting failed and when it was
    disabled; :attr:`Formatter.enabled` tells the two apart.
    """

    path: Path
    formatted: bool


def ensure_directory(target_dir: Path) -> None:
    """Create *target_dir* (and parents). Pre-existence is fine."""
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as exc:
        msg = f"Output path exists and is not a directory: {target_dir}"
        raise WriteError(msg, path=str(target_dir)) from exc
    except OSError as exc:
        msg = f"Failed to create directory {target_dir}: {exc}"
        raise WriteError(msg, path=str(target_dir)) from exc


def write_artifact(path: Path, content: str) -> None:
    """Write *content* to *path*, raising :class:`WriteError` on failure."""
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to write {path.name}: {exc}"
        raise WriteError(msg, path=str(path)) from exc


class Emitter:
    """Write artifacts into a target directory and format them."""

    def __init__(self, formatter: Formatter | None = None) -> None:
        self.formatter = formatter or NullFormatter()

    def emit(self, target_dir: Path, artifacts: dict[str, str]) -> list[EmittedFile]:
        """Write every ``{filename: content}`` pair, in order."""
        ensure_directory(target_dir)
        emitted: list[EmittedFile] = []
        for name, content in artifacts.items():
            path = target_dir / name
            write_artifact(path, content)
            emitted.append(EmittedFile(path=path, formatted=self._format_in_place(path, content)))
        return emitted

    def _format_in_place(self, path: Path, content: str) -> bool:
        if not self.formatter.enabled:
            return False
        formatted = self.formatter.format(content)
        if formatted is None:
            logger.debug("Leaving %s unformatted", path.name)
            return False
        if formatted != content:
            try:
                path.write_text(formatted, encoding="utf-8")
            except OSError as exc:
                logger.debug("Could not rewrite formatted %s: %s", path.name, exc)
                return False
        return True
