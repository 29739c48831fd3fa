"""Result reporting through Azure Pipelines logging commands.

The agent parses ``##vso[area.action key=value;...]message`` lines from
the task's stdout.
"""

from __future__ import annotations

import sys
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, TextIO

from leaktask.core.logging import get_logger

LOGGER = get_logger(__name__)


class TaskResult(str, Enum):
    """Final state of the task as shown in the pipeline."""

    SUCCEEDED = "Succeeded"
    SUCCEEDED_WITH_ISSUES = "SucceededWithIssues"
    FAILED = "Failed"


_PROPERTY_ESCAPES = (
    ("%", "%AZP25"),
    (";", "%3B"),
    ("\r", "%0D"),
    ("\n", "%0A"),
    ("]", "%5D"),
)

_MESSAGE_ESCAPES = (
    ("%", "%AZP25"),
    ("\r", "%0D"),
    ("\n", "%0A"),
)


def _escape(value: str, escapes) -> str:
    for raw, escaped in escapes:
        value = value.replace(raw, escaped)
    return value


def format_command(area_action: str, properties: Dict[str, str], message: str = "") -> str:
    """Render one logging command line."""
    props = "".join(
        f"{key}={_escape(str(value), _PROPERTY_ESCAPES)};" for key, value in properties.items()
    )
    separator = " " if props else ""
    return f"##vso[{area_action}{separator}{props}]{_escape(message, _MESSAGE_ESCAPES)}"


class PipelineReporter:
    """Writes logging commands for the pipeline agent."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    def _emit(self, line: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()

    def upload_artifact(self, container_folder: str, path: Path, artifact_name: Optional[str] = None) -> None:
        LOGGER.debug(f"Uploading {path} to artifact container {container_folder}")
        self._emit(format_command(
            "artifact.upload",
            {"containerfolder": container_folder, "artifactname": artifact_name or container_folder},
            str(path),
        ))

    def log_issue(self, message: str, issue_type: str = "error") -> None:
        self._emit(format_command("task.logissue", {"type": issue_type}, message))

    def complete(self, result: TaskResult, message: str = "") -> None:
        self._emit(format_command("task.complete", {"result": result.value}, message))
