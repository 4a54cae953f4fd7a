"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from honeycomb.codec.events import ByteRange


def now_compact() -> str:
    """Current UTC time as compact ISO (YYYYMMDDTHHmmss, for backup filenames)."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S")


def span_payload(span: ByteRange | None) -> dict[str, int] | None:
    """JSON-friendly form of a byte range.

    Examples:
        >>> span_payload(ByteRange(336, 367))
        {'start': 336, 'end': 367, 'length': 31}
        >>> span_payload(None) is None
        True
    """
    if span is None:
        return None
    return {"start": span.start, "end": span.end, "length": len(span)}


def drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    """Copy of *payload* without keys whose value is None."""
    return {key: value for key, value in payload.items() if value is not None}
