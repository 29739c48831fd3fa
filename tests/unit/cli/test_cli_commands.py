"""Tests for CLI command implementations."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from leaktask.cli.arguments import build_parser
from leaktask.cli.commands import ChangesCommand, ProvisionCommand, ScanCommand, StatusCommand
from leaktask.cli.commands.scan import cli_overrides
from leaktask.cli.exit_codes import (
    EXIT_INVALID_USAGE,
    EXIT_SCAN_FAILED,
    EXIT_SUCCESS,
    EXIT_TOOLING_ERROR,
)
from leaktask.core.errors import APIUnavailable, UnsupportedPlatform
from leaktask.pipeline.orchestrator import TaskOutcome
from leaktask.pipeline.reporting import TaskResult


def _parse(*argv: str):
    return build_parser().parse_args(list(argv))


@pytest.fixture(autouse=True)
def agent_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("INPUT_VERSION", "INPUT_SCANFOLDER", "INPUT_TASKFAIL", "INPUT_CONFIGTYPE", "BUILD_BUILDID"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AGENT_OS", "Linux")
    monkeypatch.setenv("AGENT_OSARCHITECTURE", "X64")
    monkeypatch.setenv("AGENT_TEMPDIRECTORY", str(tmp_path))
    monkeypatch.chdir(tmp_path)


class TestScanCommand:
    """Tests for the scan command."""

    def test_cli_overrides_only_carry_given_flags(self) -> None:
        overrides = cli_overrides(_parse("scan", "src", "--no-redact", "--depth", "4"))

        assert overrides["scanfolder"] == "src"
        assert overrides["redact"] is False
        assert overrides["depth"] == 4
        assert overrides["nogit"] is None
        assert overrides["taskfail"] is None

    @pytest.mark.parametrize(
        "result,expected",
        [
            (TaskResult.SUCCEEDED, EXIT_SUCCESS),
            (TaskResult.SUCCEEDED_WITH_ISSUES, EXIT_SUCCESS),
            (TaskResult.FAILED, EXIT_SCAN_FAILED),
        ],
    )
    def test_exit_code_follows_task_result(self, result: TaskResult, expected: int) -> None:
        with patch("leaktask.cli.commands.scan.ScanOrchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.run = AsyncMock(return_value=TaskOutcome(result, "done"))
            exit_code = ScanCommand(version="0.0.0").execute(_parse("scan", "--tool-version", "8.18.2"))

        assert exit_code == expected
        inputs = orchestrator_cls.return_value.run.call_args.args[0]
        assert inputs.version == "8.18.2"

    def test_invalid_inputs_are_usage_errors(self, capsys) -> None:
        with patch("leaktask.cli.commands.scan.ScanOrchestrator") as orchestrator_cls:
            exit_code = ScanCommand(version="0.0.0").execute(_parse("scan", "--config-type", "custom"))

        assert exit_code == EXIT_INVALID_USAGE
        orchestrator_cls.assert_not_called()
        assert "##vso[task.complete result=Failed;]" in capsys.readouterr().out


class TestProvisionCommand:
    def test_prints_binary_path(self, capsys, tmp_path: Path) -> None:
        binary = tmp_path / "gitleaks"
        with patch("leaktask.cli.commands.provision.ToolProvisioner") as provisioner_cls:
            provisioner_cls.return_value.provision = AsyncMock(return_value=binary)
            exit_code = ProvisionCommand().execute(
                _parse("provision", "--tool-version", "8.18.2", "--os", "darwin", "--cache-dir", str(tmp_path))
            )

        assert exit_code == EXIT_SUCCESS
        assert capsys.readouterr().out.strip() == str(binary)
        provisioner_cls.assert_called_once_with(tmp_path)
        descriptor = provisioner_cls.return_value.provision.call_args.args[0]
        assert descriptor.operating_system == "darwin"
        assert descriptor.architecture == "X64"

    def test_provisioning_error(self) -> None:
        with patch("leaktask.cli.commands.provision.ToolProvisioner") as provisioner_cls:
            provisioner_cls.return_value.provision = AsyncMock(side_effect=UnsupportedPlatform("aix", "ppc64"))
            exit_code = ProvisionCommand().execute(_parse("provision"))

        assert exit_code == EXIT_TOOLING_ERROR


class TestChangesCommand:
    def test_overrides_build_and_output_dir(self, capsys, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        with patch("leaktask.cli.commands.changes.ChangeSetResolver") as resolver_cls:
            resolver_cls.return_value.resolve_changes = AsyncMock(return_value=out_dir / "gitleaks-commits-77.txt")
            exit_code = ChangesCommand().execute(
                _parse("changes", "--build-id", "77", "--output-dir", str(out_dir))
            )

        assert exit_code == EXIT_SUCCESS
        context = resolver_cls.return_value.resolve_changes.call_args.args[0]
        assert context.build_id == "77"
        assert context.temp_dir == out_dir
        assert capsys.readouterr().out.strip().endswith("gitleaks-commits-77.txt")

    def test_change_scope_error(self) -> None:
        with patch("leaktask.cli.commands.changes.ChangeSetResolver") as resolver_cls:
            resolver_cls.return_value.resolve_changes = AsyncMock(side_effect=APIUnavailable("down"))
            exit_code = ChangesCommand().execute(_parse("changes"))

        assert exit_code == EXIT_TOOLING_ERROR


class TestStatusCommand:
    def test_lists_cache_and_configs(self, capsys, tmp_path: Path) -> None:
        entry = tmp_path / "gitleaks" / "8.18.2" / "linux-amd64"
        entry.mkdir(parents=True)
        (entry / "gitleaks").write_bytes(b"binary")
        (entry / "gitleaks").chmod(0o755)

        exit_code = StatusCommand(version="0.3.0").execute(_parse("status", "--cache-dir", str(tmp_path)))

        out = capsys.readouterr().out
        assert exit_code == EXIT_SUCCESS
        assert "leaktask version: 0.3.0" in out
        assert "Platform: linux-amd64 (release tag linux_x64)" in out
        assert "8.18.2 [linux-amd64]" in out
        assert "cloud-keys.toml" in out

    def test_unsupported_platform_still_succeeds(self, capsys, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("AGENT_OS", "Plan9")

        exit_code = StatusCommand(version="0.3.0").execute(_parse("status", "--cache-dir", str(tmp_path)))

        assert exit_code == EXIT_SUCCESS
        assert "(none)" in capsys.readouterr().out
