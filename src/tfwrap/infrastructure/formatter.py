"""Canonical HCL formatting via an external ``fmt`` command.

Formatting is best-effort. :meth:`Formatter.format` returns ``None``
whenever the text could not be formatted; callers keep the original
content in that case.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

logger = logging.getLogger(__name__)

DEFAULT_FORMAT_COMMAND: tuple[str, ...] = ("tofu", "fmt", "-")


class Formatter:
    """Base formatter: subclasses return formatted text or ``None``."""

    #: False for formatters that never change text; emitted files then
    #: report ``formatted=False`` without counting as a failure.
    enabled = True

    def format(self, content: str) -> str | None:
        raise NotImplementedError


class NullFormatter(Formatter):
    """Leave content untouched (formatting disabled)."""

    enabled = False

    def format(self, content: str) -> str | None:
        return content


class CommandFormatter(Formatter):
    """Pipe content through a formatter command (``tofu fmt -`` by default).

    The command reads HCL on stdin and writes the formatted result to
    stdout, as ``tofu fmt -`` and ``terraform fmt -`` do.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_FORMAT_COMMAND,
        *,
        timeout: float | None = 60.0,
    ) -> None:
        if not command:
            msg = "Formatter command must not be empty"
            raise ValueError(msg)
        self.command = list(command)
        self.timeout = timeout

    def format(self, content: str) -> str | None:
        try:
            result = subprocess.run(
                self.command,
                input=content,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as exc:
            logger.debug("Formatter %s failed: %s", self.command[0], exc)
            return None
        if content.strip() and not result.stdout.strip():
            logger.debug("Formatter %s produced no output", self.command[0])
            return None
        return result.stdout
