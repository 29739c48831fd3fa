"""Task input loading and merging.

Inputs come from, in increasing precedence:
- Built-in defaults
- A YAML file (.leaktask.yml in the working directory, or --config)
- Pipeline inputs exposed as INPUT_<NAME> environment variables
- CLI flags

String values in the YAML file support ${VAR} and ${VAR:-default}.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from leaktask.config.models import ConfigType, TaskInputs
from leaktask.config.validation import (
    VALID_INPUT_KEYS,
    ValidationSeverity,
    parse_bool,
    parse_depth,
    validate_inputs,
)
from leaktask.core.logging import get_logger
from leaktask.scan.config import ReportFormat

LOGGER = get_logger(__name__)

PROJECT_CONFIG_NAMES = [".leaktask.yml", ".leaktask.yaml", "leaktask.yml", "leaktask.yaml"]

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

INPUT_ENV_PREFIX = "INPUT_"


class ConfigError(Exception):
    """Invalid or unreadable task inputs."""

    stage = "configuration"


def load_task_inputs(
    project_root: Path,
    config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TaskInputs:
    """Load task inputs with proper precedence.

    Args:
        project_root: Directory searched for .leaktask.yml.
        config_path: Explicit YAML file (takes the place of the project file).
        cli_overrides: Values given on the command line (None values are ignored).
        environ: Environment to read INPUT_* variables from.

    Raises:
        ConfigError: If a file cannot be parsed or inputs are invalid.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    file_path = config_path
    if file_path is not None:
        if not file_path.exists():
            raise ConfigError(f"Config file not found: {file_path}")
    else:
        file_path = find_project_config(project_root)

    if file_path is not None:
        try:
            merged.update(load_yaml_file(file_path))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {file_path}: {e}") from e
        sources.append(f"file:{file_path}")
        LOGGER.debug(f"Loaded inputs from {file_path}")

    env_inputs = inputs_from_environment(environ)
    if env_inputs:
        merged.update(env_inputs)
        sources.append("environment")

    if cli_overrides:
        overrides = {k: v for k, v in cli_overrides.items() if v is not None}
        if overrides:
            merged.update(overrides)
            sources.append("cli")

    issues = validate_inputs(merged, source=", ".join(sources) or "defaults")
    errors = [issue for issue in issues if issue.severity == ValidationSeverity.ERROR]
    if errors:
        raise ConfigError("; ".join(str(issue) for issue in errors))

    inputs = dict_to_inputs(merged)
    inputs._sources = sources
    LOGGER.debug(f"Inputs loaded from sources: {sources}")
    return inputs


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find an input file in the project root."""
    for name in PROJECT_CONFIG_NAMES:
        candidate = project_root / name
        if candidate.exists():
            return candidate
    return None


def inputs_from_environment(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect INPUT_<NAME> variables for every known input."""
    env = os.environ if environ is None else environ
    found: Dict[str, str] = {}
    for key in sorted(VALID_INPUT_KEYS):
        value = env.get(f"{INPUT_ENV_PREFIX}{key.upper()}")
        if value is not None and value != "":
            found[key] = value
    return found


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping, expanding environment variables in strings.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in string values."""
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def dict_to_inputs(data: Dict[str, Any]) -> TaskInputs:
    """Convert a validated input dictionary to TaskInputs."""
    defaults = TaskInputs()
    values: Dict[str, Any] = {}

    for key in ("nogit", "scanonlychanges", "verbose", "redact", "uploadresults", "taskfail"):
        parsed = parse_bool(data[key]) if data.get(key) is not None else None
        values[key] = getattr(defaults, key) if parsed is None else parsed

    depth = data.get("depth")
    values["depth"] = parse_depth(depth) if depth is not None and depth != "" else None

    values["version"] = _optional_str(data.get("version")) or defaults.version
    values["scanfolder"] = _optional_str(data.get("scanfolder")) or defaults.scanfolder
    values["configtype"] = ConfigType(str(data.get("configtype") or defaults.configtype.value).lower())
    values["reportformat"] = ReportFormat(
        str(data.get("reportformat") or defaults.reportformat.value).lower()
    )
    values["predefinedconfigfile"] = _optional_str(data.get("predefinedconfigfile"))
    values["configfile"] = _optional_str(data.get("configfile"))
    values["arguments"] = _optional_str(data.get("arguments"))

    return TaskInputs(**values)
