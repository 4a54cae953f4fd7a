"""Tests for the toggle command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from honeycomb.cli import cli
from honeycomb.domain.locator import locate
from tests.conftest import POLICY_OFFSET


class TestToggleCommand:
    def test_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["toggle", "--help"])
        assert result.exit_code == 0
        assert "--overwrite" in result.output
        assert "--mode" in result.output

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["toggle", "--examples"])
        assert result.exit_code == 0
        assert "--overwrite" in result.output

    def test_remove_to_output(
        self, cli_runner: CliRunner, profile_file: Path, user_profile: bytes, tmp_path: Path
    ) -> None:
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli,
            ["toggle", "no_install_unknown_sources", "-p", str(profile_file), "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert "removed" in result.output
        assert out.read_bytes() == user_profile[:POLICY_OFFSET] + user_profile[POLICY_OFFSET + 31 :]
        assert profile_file.read_bytes() == user_profile

    def test_json_output(self, cli_runner: CliRunner, profile_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli,
            ["--json", "toggle", "no_factory_reset", "-p", str(profile_file), "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["data"]["action"] == "inserted"
        assert data["data"]["appended"] == ["no_factory_reset"]
        assert locate(out.read_bytes(), "no_factory_reset").found

    def test_quiet_prints_action(
        self, cli_runner: CliRunner, profile_file: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli, ["-q", "toggle", "no_sms", "-p", str(profile_file), "-o", str(out)]
        )
        assert result.exit_code == 0
        assert result.stdout.strip() == "removed"

    def test_overwrite_keeps_backup(
        self, cli_runner: CliRunner, profile_file: Path, user_profile: bytes
    ) -> None:
        result = cli_runner.invoke(
            cli, ["toggle", "no_sms", "-p", str(profile_file), "--overwrite"]
        )
        assert result.exit_code == 0, result.output
        backups = list(profile_file.parent.glob("0.xml.*.bak"))
        assert len(backups) == 1
        assert backups[0].read_bytes() == user_profile
        assert not locate(profile_file.read_bytes(), "no_sms").found

    def test_overwrite_no_backup(self, cli_runner: CliRunner, profile_file: Path) -> None:
        result = cli_runner.invoke(
            cli, ["toggle", "no_sms", "-p", str(profile_file), "--overwrite", "--no-backup"]
        )
        assert result.exit_code == 0
        assert list(profile_file.parent.glob("*.bak")) == []

    def test_output_required(self, cli_runner: CliRunner, profile_file: Path) -> None:
        result = cli_runner.invoke(cli, ["toggle", "no_sms", "-p", str(profile_file)])
        assert result.exit_code == 1
        assert "OUTPUT_REQUIRED" in result.output

    def test_output_and_overwrite_conflict(
        self, cli_runner: CliRunner, profile_file: Path, tmp_path: Path
    ) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "toggle",
                "no_sms",
                "-p",
                str(profile_file),
                "-o",
                str(tmp_path / "out.xml"),
                "--overwrite",
            ],
        )
        assert result.exit_code == 2
        assert "mutually exclusive" in result.output

    def test_mode_set_on_present_policy_fails(
        self, cli_runner: CliRunner, profile_file: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli,
            ["--json", "toggle", "no_sms", "-p", str(profile_file), "-o", str(out)]
            + ["--mode", "set"],
        )
        assert result.exit_code == 1
        assert "ALREADY_EXISTS" in result.output
        assert not out.exists()

    def test_mode_clear_on_absent_policy_fails(
        self, cli_runner: CliRunner, profile_file: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli,
            ["toggle", "no_camera", "-p", str(profile_file), "-o", str(out), "--mode", "clear"],
        )
        assert result.exit_code == 1
        assert "NOTHING_TO_REMOVE" in result.output

    def test_unknown_policy(
        self, cli_runner: CliRunner, profile_file: Path, tmp_path: Path
    ) -> None:
        result = cli_runner.invoke(
            cli,
            ["toggle", "no_such_thing", "-p", str(profile_file), "-o", str(tmp_path / "o.xml")],
        )
        assert result.exit_code == 1
        assert "UNKNOWN_POLICY" in result.output

    def test_show_xml(self, cli_runner: CliRunner, profile_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.xml"
        result = cli_runner.invoke(
            cli,
            ["toggle", "no_camera", "-p", str(profile_file), "-o", str(out), "--show-xml"],
        )
        assert result.exit_code == 0, result.output
        assert 'no_camera="true"' in result.output
