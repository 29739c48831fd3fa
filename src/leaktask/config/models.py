"""Typed task inputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from leaktask.scan.config import ReportFormat


class ConfigType(str, Enum):
    """Which scanner configuration to use."""

    DEFAULT = "default"
    PREDEFINED = "predefined"
    CUSTOM = "custom"


@dataclass
class TaskInputs:
    """Inputs of one task run, after merging all sources.

    Attributes mirror the task's input names.
    """

    version: str = "latest"
    scanfolder: str = "."
    configtype: ConfigType = ConfigType.DEFAULT
    predefinedconfigfile: Optional[str] = None
    configfile: Optional[str] = None
    nogit: bool = False
    scanonlychanges: bool = False
    depth: Optional[int] = None
    reportformat: ReportFormat = ReportFormat.JSON
    verbose: bool = False
    redact: bool = True
    arguments: Optional[str] = None
    uploadresults: bool = True
    taskfail: bool = True

    # Populated by the loader for diagnostics
    _sources: List[str] = field(default_factory=list, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary (enum members as their values)."""
        return {
            "version": self.version,
            "scanfolder": self.scanfolder,
            "configtype": self.configtype.value,
            "predefinedconfigfile": self.predefinedconfigfile,
            "configfile": self.configfile,
            "nogit": self.nogit,
            "scanonlychanges": self.scanonlychanges,
            "depth": self.depth,
            "reportformat": self.reportformat.value,
            "verbose": self.verbose,
            "redact": self.redact,
            "arguments": self.arguments,
            "uploadresults": self.uploadresults,
            "taskfail": self.taskfail,
        }
