"""Error taxonomy for the wrapper pipeline.

Domain and infrastructure code raise these; the service layer converts
them into a failed :class:`~tfwrap.services.result.ServiceResult` whose
``error.code`` is the exception's ``code``.
"""

from __future__ import annotations

from typing import Any, ClassVar


class WrapperError(Exception):
    """Base class for every fatal pipeline error."""

    code: ClassVar[str] = "WRAPPER_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


class InputError(WrapperError):
    """Missing or malformed user input (reported before any I/O)."""

    code = "INPUT_ERROR"


class FetchError(WrapperError):
    """Remote unreachable, ref missing, timeout, or no variables file."""

    code = "FETCH_ERROR"


class ParseError(WrapperError):
    """Declaration file unreadable or not valid HCL."""

    code = "PARSE_ERROR"


class WriteError(WrapperError):
    """Output directory or artifact could not be written."""

    code = "WRITE_ERROR"
