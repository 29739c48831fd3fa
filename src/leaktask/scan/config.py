"""Settings for a single scanner run."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from leaktask.core.logging import get_logger

LOGGER = get_logger(__name__)


class ReportFormat(str, Enum):
    """Report formats the scanner can write."""

    JSON = "json"
    CSV = "csv"
    SARIF = "sarif"

    @property
    def artifact_container(self) -> str:
        """Artifact folder that pipeline UIs pick the report up from."""
        return "CodeAnalysisLogs" if self is ReportFormat.SARIF else "gitleaks"


@dataclass(frozen=True)
class ScanConfig:
    """Everything needed to build one scanner command line.

    Attributes:
        scan_root: Directory to scan.
        report_path: Where the scanner writes its report.
        report_format: Report format.
        custom_config_file: Explicit config file chosen by the user.
        predefined_config_file: Path of a config shipped with leaktask.
        scope_file: Commits file limiting the scan, if any.
        depth: Commit depth passed through with the scope file.
        extra_args: Pass-through flags, in order.
        no_git: Scan the directory as plain files.
        verbose: Scanner verbose output.
        redact: Redact secrets from scanner output.
    """

    scan_root: str
    report_path: str
    report_format: ReportFormat = ReportFormat.JSON
    custom_config_file: Optional[str] = None
    predefined_config_file: Optional[str] = None
    scope_file: Optional[str] = None
    depth: Optional[int] = None
    extra_args: Tuple[str, ...] = ()
    no_git: bool = False
    verbose: bool = False
    redact: bool = False


def report_file_path(temp_dir: Path, report_format: ReportFormat) -> Path:
    """Return a fresh report path under the run's temporary directory."""
    return Path(temp_dir) / f"gitleaks-report-{uuid.uuid4()}.{report_format.value}"


def split_extra_arguments(arguments: Optional[str]) -> List[str]:
    """Split a free-form argument string on ``--`` into separate flags.

    Anything before the first ``--`` is dropped; each remaining part becomes
    ``--<part>`` with backslashes turned into forward slashes.

    >>> split_extra_arguments("--threads=4 --leaks-exit-code=2")
    ['--threads=4', '--leaks-exit-code=2']
    """
    if not arguments:
        return []
    parts = arguments.split("--")
    leading = parts.pop(0).strip()
    if leading:
        LOGGER.warning(f"Ignoring arguments without a leading '--': {leading!r}")
    flags = []
    for part in parts:
        part = part.replace("\\", "/").strip()
        if part:
            flags.append(f"--{part}")
    return flags
