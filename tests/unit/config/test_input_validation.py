"""Tests for raw task input validation."""

from __future__ import annotations

import pytest

from leaktask.config.validation import (
    ValidationSeverity,
    parse_bool,
    parse_depth,
    validate_inputs,
)


def _errors(issues):
    return [i for i in issues if i.severity == ValidationSeverity.ERROR]


class TestParseBool:
    @pytest.mark.parametrize("value", [True, "true", "True", "YES", "1", "on"])
    def test_true(self, value) -> None:
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [False, "false", "No", "0", "off", ""])
    def test_false(self, value) -> None:
        assert parse_bool(value) is False

    def test_not_a_bool(self) -> None:
        assert parse_bool("maybe") is None


class TestParseDepth:
    @pytest.mark.parametrize("value,expected", [(3, 3), ("12", 12), (" 4 ", 4), (5.0, 5)])
    def test_whole_numbers(self, value, expected) -> None:
        assert parse_depth(value) == expected

    @pytest.mark.parametrize("value", [True, False, 2.5, "2.5", "ten", None, [3]])
    def test_not_a_depth(self, value) -> None:
        assert parse_depth(value) is None


class TestValidateInputs:
    """Tests for validate_inputs."""

    def test_valid_inputs(self) -> None:
        issues = validate_inputs(
            {"version": "latest", "reportformat": "SARIF", "nogit": "true", "depth": "10"}
        )
        assert issues == []

    def test_unknown_key_is_warning_with_suggestion(self) -> None:
        issues = validate_inputs({"reportformt": "json"}, source="file:.leaktask.yml")

        assert len(issues) == 1
        assert issues[0].severity == ValidationSeverity.WARNING
        assert issues[0].suggestion == "reportformat"
        assert "did you mean 'reportformat'" in str(issues[0])

    def test_bad_boolean(self) -> None:
        errors = _errors(validate_inputs({"redact": "sometimes"}))
        assert [e.key for e in errors] == ["redact"]

    def test_bad_report_format(self) -> None:
        errors = _errors(validate_inputs({"reportformat": "xml"}))
        assert errors[0].key == "reportformat"

    def test_bad_config_type(self) -> None:
        errors = _errors(validate_inputs({"configtype": "builtin"}))
        assert errors[0].key == "configtype"

    def test_custom_requires_config_file(self) -> None:
        errors = _errors(validate_inputs({"configtype": "custom"}))
        assert errors[0].key == "configfile"

    def test_predefined_requires_name(self) -> None:
        errors = _errors(validate_inputs({"configtype": "predefined"}))
        assert errors[0].key == "predefinedconfigfile"

    @pytest.mark.parametrize("depth", ["0", "-1", "ten", 2.5j, 2.5, True, False])
    def test_bad_depth(self, depth) -> None:
        errors = _errors(validate_inputs({"depth": depth}))
        assert errors[0].key == "depth"

    def test_empty_depth_is_unset(self) -> None:
        assert validate_inputs({"depth": ""}) == []
