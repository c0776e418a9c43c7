"""Return types shared by every tfwrap service.

A service method never lets a pipeline error escape: it answers with a
:class:`ServiceResult`, and the CLI decides how to render it and which
exit code to use.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Why an operation failed.

    ``code`` is a stable identifier such as ``FETCH_ERROR``; ``detail``
    carries the failing source, path or variable when known.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one operation (``resolve_source``, ``generate_wrapper``...).

    ``data`` is only meaningful when ``ok`` is true and ``error`` only when
    it is false. ``warnings`` lists recoverable problems such as a missing
    formatter. ``meta`` holds the span tree of ``--verbose`` runs.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
