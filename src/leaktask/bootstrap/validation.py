"""Validation of cached scanner binaries."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path


class ToolStatus(str, Enum):
    """Status of a tool binary."""

    PRESENT = "present"
    MISSING = "missing"
    EMPTY = "empty"
    NOT_EXECUTABLE = "not_executable"


def validate_binary(path: Path, require_exec_bit: bool = True) -> ToolStatus:
    """Validate a single tool binary.

    Args:
        path: Path to the tool binary.
        require_exec_bit: Whether the executable permission is checked.
            Windows has no such bit.

    Returns:
        ToolStatus indicating whether the tool is usable.
    """
    if not path.is_file():
        return ToolStatus.MISSING

    if path.stat().st_size == 0:
        return ToolStatus.EMPTY

    if require_exec_bit and not os.access(path, os.X_OK):
        return ToolStatus.NOT_EXECUTABLE

    return ToolStatus.PRESENT
