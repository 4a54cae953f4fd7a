"""Tests for service-layer helpers."""

from __future__ import annotations

import re

from honeycomb.codec.events import ByteRange
from honeycomb.services._helpers import drop_none, now_compact, span_payload


def test_now_compact_format() -> None:
    assert re.fullmatch(r"\d{8}T\d{6}", now_compact())


def test_span_payload() -> None:
    assert span_payload(ByteRange(336, 367)) == {"start": 336, "end": 367, "length": 31}
    assert span_payload(None) is None


def test_drop_none() -> None:
    assert drop_none({"a": 1, "b": None, "c": 0}) == {"a": 1, "c": 0}
