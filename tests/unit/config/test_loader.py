"""Tests for task input loading and precedence."""

from __future__ import annotations

from pathlib import Path

import pytest

from leaktask.config.loader import (
    ConfigError,
    expand_env_vars,
    find_project_config,
    inputs_from_environment,
    load_task_inputs,
)
from leaktask.config.models import ConfigType, TaskInputs
from leaktask.scan.config import ReportFormat


class TestLoadTaskInputs:
    """Tests for load_task_inputs."""

    def test_defaults(self, tmp_path: Path) -> None:
        inputs = load_task_inputs(tmp_path, environ={})

        assert inputs == TaskInputs()
        assert inputs.version == "latest"
        assert inputs.redact is True
        assert inputs._sources == []

    def test_project_file(self, tmp_path: Path) -> None:
        (tmp_path / ".leaktask.yml").write_text(
            "version: 8.18.2\n"
            "reportformat: sarif\n"
            "nogit: true\n"
            "depth: 20\n"
        )

        inputs = load_task_inputs(tmp_path, environ={})

        assert inputs.version == "8.18.2"
        assert inputs.reportformat is ReportFormat.SARIF
        assert inputs.nogit is True
        assert inputs.depth == 20
        assert inputs._sources == [f"file:{tmp_path / '.leaktask.yml'}"]

    def test_environment_overrides_file(self, tmp_path: Path) -> None:
        (tmp_path / ".leaktask.yml").write_text("reportformat: csv\nverbose: false\n")

        inputs = load_task_inputs(
            tmp_path,
            environ={"INPUT_REPORTFORMAT": "json", "INPUT_VERBOSE": "True"},
        )

        assert inputs.reportformat is ReportFormat.JSON
        assert inputs.verbose is True

    def test_cli_overrides_environment(self, tmp_path: Path) -> None:
        inputs = load_task_inputs(
            tmp_path,
            cli_overrides={"taskfail": False, "version": None},
            environ={"INPUT_TASKFAIL": "true", "INPUT_VERSION": "8.17.0"},
        )

        assert inputs.taskfail is False
        assert inputs.version == "8.17.0"
        assert inputs._sources == ["environment", "cli"]

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        config = tmp_path / "ci" / "leaks.yaml"
        config.parent.mkdir()
        config.write_text("configtype: custom\nconfigfile: ci/gitleaks.toml\n")

        inputs = load_task_inputs(tmp_path, config_path=config, environ={})

        assert inputs.configtype is ConfigType.CUSTOM
        assert inputs.configfile == "ci/gitleaks.toml"

    def test_missing_explicit_config_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_task_inputs(tmp_path, config_path=tmp_path / "nope.yml", environ={})

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        (tmp_path / ".leaktask.yml").write_text("version: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_task_inputs(tmp_path, environ={})

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        (tmp_path / ".leaktask.yml").write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_task_inputs(tmp_path, environ={})

    def test_invalid_values_raise(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_task_inputs(tmp_path, environ={"INPUT_NOGIT": "maybe", "INPUT_DEPTH": "-3"})

        message = str(exc_info.value)
        assert "nogit" in message
        assert "depth" in message

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / ".leaktask.yml").write_text("")
        assert load_task_inputs(tmp_path, environ={}) == TaskInputs()

    def test_env_vars_expanded_in_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LEAKS_CONFIG", "security/gitleaks.toml")
        monkeypatch.delenv("EXTRA_ARGS", raising=False)
        (tmp_path / ".leaktask.yml").write_text(
            "configtype: custom\nconfigfile: ${LEAKS_CONFIG}\narguments: ${EXTRA_ARGS:---threads=2}\n"
        )

        inputs = load_task_inputs(tmp_path, environ={})

        assert inputs.configfile == "security/gitleaks.toml"
        assert inputs.arguments == "--threads=2"


class TestHelpers:
    def test_find_project_config_prefers_dotfile(self, tmp_path: Path) -> None:
        (tmp_path / "leaktask.yml").write_text("")
        (tmp_path / ".leaktask.yml").write_text("")
        assert find_project_config(tmp_path) == tmp_path / ".leaktask.yml"

    def test_find_project_config_none(self, tmp_path: Path) -> None:
        assert find_project_config(tmp_path) is None

    def test_inputs_from_environment_ignores_unknown_and_empty(self) -> None:
        found = inputs_from_environment(
            {"INPUT_SCANFOLDER": "src", "INPUT_ARGUMENTS": "", "INPUT_SOMETHING": "x", "PATH": "/bin"}
        )
        assert found == {"scanfolder": "src"}

    def test_expand_env_vars_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOOL_VERSION", "8.18.2")
        monkeypatch.delenv("UNSET_VAR", raising=False)
        data = {"a": "${TOOL_VERSION}", "b": ["${UNSET_VAR:-x}", 3], "c": {"d": "${UNSET_VAR}"}}

        assert expand_env_vars(data) == {"a": "8.18.2", "b": ["x", 3], "c": {"d": ""}}


class TestDepthFromYaml:
    """YAML turns depth values into numbers and booleans before validation."""

    @pytest.mark.parametrize("value", ["2.5", "true", "yes"])
    def test_rejected(self, tmp_path: Path, value: str) -> None:
        (tmp_path / ".leaktask.yml").write_text(f"depth: {value}\n")

        with pytest.raises(ConfigError, match="depth"):
            load_task_inputs(tmp_path, environ={})

    def test_whole_float_accepted(self, tmp_path: Path) -> None:
        (tmp_path / ".leaktask.yml").write_text("depth: 8.0\n")
        assert load_task_inputs(tmp_path, environ={}).depth == 8
