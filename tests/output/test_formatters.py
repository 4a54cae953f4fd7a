"""Tests for output formatting modes."""

from __future__ import annotations

import json

from honeycomb.output.formatters import OutputSettings, format_result
from honeycomb.services.result import ServiceResult

TOGGLED = ServiceResult(
    ok=True,
    op="toggle",
    data={
        "policy": "no_sms",
        "action": "removed",
        "enabled": False,
        "span": {"start": 367, "end": 370, "length": 3},
        "delta": -3,
        "output": "/tmp/out.xml",
        "appended": [],
        "renumbered": 0,
        "promoted": 0,
    },
)


class TestFormatResult:
    def test_json(self) -> None:
        out = format_result(TOGGLED, settings=OutputSettings(json_output=True))
        assert json.loads(out)["data"]["span"]["start"] == 367

    def test_json_wins_over_quiet(self) -> None:
        out = format_result(TOGGLED, settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(out)["ok"] is True

    def test_quiet(self) -> None:
        assert format_result(TOGGLED, settings=OutputSettings(quiet=True)) == "removed"

    def test_human_default(self) -> None:
        out = format_result(TOGGLED)
        assert out.splitlines()[0].split() == ["OK", "toggle"]
        assert "policy: no_sms" in out
        assert "span: [367, 370)  3 bytes" in out
        assert "delta: -3 bytes" in out
        assert "renumbered" not in out

    def test_human_verbose(self) -> None:
        out = format_result(TOGGLED, settings=OutputSettings(verbose=True))
        assert "renumbered: 0" in out

    def test_failure(self) -> None:
        failed = ServiceResult.failure("toggle", "SAME_PATH", "same file", path="/x")
        assert format_result(failed, settings=OutputSettings(quiet=True)) == (
            "ERROR: toggle: same file"
        )
        human = format_result(failed)
        assert "ERROR" in human
        assert "[SAME_PATH]" in human
        assert "path: /x" not in human
        assert "path: /x" in format_result(failed, settings=OutputSettings(verbose=True))
