"""Tests for ServiceResult and ServiceError."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from honeycomb.errors import AmbiguousMatch
from honeycomb.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_defaults(self) -> None:
        result = ServiceResult(ok=True, op="toggle", data={"action": "removed"})
        assert result.error is None
        assert result.warnings == []
        assert result.meta is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="toggle")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]

    def test_failure_helper(self) -> None:
        result = ServiceResult.failure("toggle", "SAME_PATH", "same file", path="/x")
        assert not result.ok
        assert result.error == ServiceError(
            code="SAME_PATH", message="same file", detail={"path": "/x"}
        )

    def test_from_core_exception(self) -> None:
        exc = AmbiguousMatch("twice", policy="no_sms", spans=[(1, 2), (3, 4)])
        result = ServiceResult.from_exception("locate", exc)
        assert result.error is not None
        assert result.error.code == "AMBIGUOUS_MATCH"
        assert result.error.message == "twice"
        payload = json.loads(result.model_dump_json())
        assert payload["error"]["detail"]["spans"] == [[1, 2], [3, 4]]
