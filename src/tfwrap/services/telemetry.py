"""Stage timing for ``--verbose`` runs.

A :func:`traced` service call opens a root :class:`Span`; every
:func:`trace_span` block inside it (resolve, fetch, extract, render,
emit) hangs a child off the span currently active in this context. The
finished tree lands in ``ServiceResult.meta["telemetry"]``.

With verbose mode off, both entry points reduce to one ContextVar read.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from tfwrap.services.result import ServiceResult

_verbose_enabled: ContextVar[bool] = ContextVar("_verbose_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)

_P = ParamSpec("_P")
_R = TypeVar("_R")


@dataclass
class Span:
    """A timed pipeline stage and the stages nested inside it."""

    name: str
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def child(self, name: str) -> Span:
        span = Span(name=name)
        self.children.append(span)
        return span

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; empty annotations and children are omitted."""
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Time the enclosed stage as a child of the active span.

    Yields None outside a :func:`traced` call or when verbose mode is off,
    so callers guard annotations with ``if span:``.
    """
    parent = _current_span.get() if _verbose_enabled.get() else None
    if parent is None:
        yield None
        return

    span = parent.child(name)
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)


def _log_span(span: Span, *, ok: bool) -> None:
    structlog.get_logger("tfwrap.telemetry").debug(
        "span.complete",
        span_name=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=ok,
        children=len(span.children),
    )


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Open a root span around a service method.

    A returned :class:`ServiceResult` is copied with the span tree merged
    into its ``meta``; any other return value passes through untouched.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _verbose_enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        token = _current_span.set(root)
        ok = False
        try:
            result = func(*args, **kwargs)
            ok = result.ok if isinstance(result, ServiceResult) else True
        finally:
            root.end()
            _current_span.reset(token)
            _log_span(root, ok=ok)

        if isinstance(result, ServiceResult):
            # ServiceResult is frozen.
            meta = {**(result.meta or {}), "telemetry": root.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn on span collection for the current context (``--verbose``)."""
    _verbose_enabled.set(True)


def disable_telemetry() -> None:
    _verbose_enabled.set(False)
