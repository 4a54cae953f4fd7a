"""Per-call timing for PolicyService.

``--verbose`` turns on span collection.  Each ``@traced`` service method
becomes a root span; the phases it marks with :func:`trace_span`
(read, apply, write ...) become children, annotated with whatever the
phase wants to report (byte deltas, actions).  The finished tree lands
in ``ServiceResult.meta["telemetry"]`` and is logged at DEBUG.

Collection is off by default and then costs one ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog

from honeycomb.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("honeycomb_telemetry", default=False)
_current_span: ContextVar[Span | None] = ContextVar("honeycomb_span", default=None)


@dataclass
class Span:
    """One timed phase and the phases nested in it."""

    name: str
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def child(self, name: str) -> Span:
        span = Span(name)
        self.children.append(span)
        return span

    def close(self) -> None:
        if self.finished is None:
            self.finished = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.close()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Time a phase under the active service call.

    Yields None when collection is off or no ``@traced`` call is active,
    so callers guard annotations with ``if span is not None``.
    """
    parent = get_current_span()
    if parent is None:
        yield None
        return
    with _activate(parent.child(name)) as span:
        yield span


def _log_span(span: Span, *, ok: bool) -> None:
    structlog.get_logger("honeycomb.telemetry").debug(
        "telemetry.span",
        span=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=ok,
        phases=[c.name for c in span.children],
    )


def traced[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Make *func* a root span and attach its tree to the returned ServiceResult."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(func.__qualname__)
        try:
            with _activate(root):
                result = func(*args, **kwargs)
        except Exception:
            _log_span(root, ok=False)
            raise

        if not isinstance(result, ServiceResult):
            _log_span(root, ok=True)
            return result
        _log_span(root, ok=result.ok)
        meta = {**(result.meta or {}), "telemetry": root.to_dict()}
        return result.model_copy(update={"meta": meta})  # type: ignore[return-value]

    return wrapper


def enable_telemetry() -> None:
    """Start collecting spans (AppContext calls this for ``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The innermost active span, or None when collection is off."""
    if not _enabled.get():
        return None
    return _current_span.get()
