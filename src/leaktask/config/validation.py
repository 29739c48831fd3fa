"""Validation of raw task inputs.

Unknown keys are warnings (with a suggestion when one is close); values
that would make the run fail are errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from leaktask.config.models import ConfigType
from leaktask.core.logging import get_logger
from leaktask.scan.config import ReportFormat

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Run would fail
    WARNING = "warning"  # Likely mistake but usable


@dataclass
class ConfigValidationIssue:
    """A validation issue with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.source}: {self.message}"
        if self.suggestion:
            text = f"{text} (did you mean '{self.suggestion}'?)"
        return text


VALID_INPUT_KEYS: Set[str] = {
    "version",
    "scanfolder",
    "configtype",
    "predefinedconfigfile",
    "configfile",
    "nogit",
    "scanonlychanges",
    "depth",
    "reportformat",
    "verbose",
    "redact",
    "arguments",
    "uploadresults",
    "taskfail",
}

BOOLEAN_KEYS: Set[str] = {
    "nogit",
    "scanonlychanges",
    "verbose",
    "redact",
    "uploadresults",
    "taskfail",
}

_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off", ""}


def parse_bool(value: Any) -> Optional[bool]:
    """Parse a pipeline boolean; returns None when the value is not one."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


def parse_depth(value: Any) -> Optional[int]:
    """Parse a commit depth; returns None unless it is a whole number.

    Booleans and fractional numbers are not depths, even though YAML hands
    them over as numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _suggest(key: str) -> Optional[str]:
    matches = get_close_matches(key, sorted(VALID_INPUT_KEYS), n=1, cutoff=0.6)
    return matches[0] if matches else None


def validate_inputs(data: Dict[str, Any], source: str = "inputs") -> List[ConfigValidationIssue]:
    """Validate raw inputs.

    Args:
        data: Merged input dictionary.
        source: Description of where the data came from.

    Returns:
        All issues found; callers decide how to report them.
    """
    issues: List[ConfigValidationIssue] = []

    for key in data:
        if key not in VALID_INPUT_KEYS:
            issues.append(ConfigValidationIssue(
                message=f"Unknown input '{key}'",
                source=source,
                severity=ValidationSeverity.WARNING,
                key=key,
                suggestion=_suggest(key),
            ))

    for key in BOOLEAN_KEYS & set(data):
        if data[key] is not None and parse_bool(data[key]) is None:
            issues.append(ConfigValidationIssue(
                message=f"Input '{key}' must be true or false, got {data[key]!r}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key=key,
            ))

    report_format = data.get("reportformat")
    valid_formats = [f.value for f in ReportFormat]
    if report_format and str(report_format).lower() not in valid_formats:
        issues.append(ConfigValidationIssue(
            message=f"Unsupported report format '{report_format}' (use {', '.join(valid_formats)})",
            source=source,
            severity=ValidationSeverity.ERROR,
            key="reportformat",
        ))

    config_type = str(data.get("configtype") or ConfigType.DEFAULT.value).lower()
    valid_types = [t.value for t in ConfigType]
    if config_type not in valid_types:
        issues.append(ConfigValidationIssue(
            message=f"Unsupported config type '{config_type}' (use {', '.join(valid_types)})",
            source=source,
            severity=ValidationSeverity.ERROR,
            key="configtype",
        ))
    elif config_type == ConfigType.CUSTOM.value and not data.get("configfile"):
        issues.append(ConfigValidationIssue(
            message="Config type 'custom' requires 'configfile'",
            source=source,
            severity=ValidationSeverity.ERROR,
            key="configfile",
        ))
    elif config_type == ConfigType.PREDEFINED.value and not data.get("predefinedconfigfile"):
        issues.append(ConfigValidationIssue(
            message="Config type 'predefined' requires 'predefinedconfigfile'",
            source=source,
            severity=ValidationSeverity.ERROR,
            key="predefinedconfigfile",
        ))

    depth = data.get("depth")
    if depth is not None and depth != "":
        parsed_depth = parse_depth(depth)
        if parsed_depth is None or parsed_depth < 1:
            issues.append(ConfigValidationIssue(
                message=f"Input 'depth' must be a positive integer, got {depth!r}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key="depth",
            ))

    for issue in issues:
        if issue.severity == ValidationSeverity.WARNING:
            LOGGER.warning(str(issue))

    return issues
