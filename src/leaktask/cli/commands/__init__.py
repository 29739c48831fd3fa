"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from pathlib import Path
from typing import Optional

from leaktask.bootstrap.paths import get_tool_cache_root


class Command(ABC):
    """Base class for CLI commands."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier."""

    @abstractmethod
    def execute(self, args: Namespace) -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


def cache_root_from_args(args: Namespace) -> Path:
    """Tool cache root from --cache-dir, or the environment default."""
    cache_dir: Optional[str] = getattr(args, "cache_dir", None)
    return Path(cache_dir) if cache_dir else get_tool_cache_root()


# ruff: noqa: E402
from leaktask.cli.commands.changes import ChangesCommand
from leaktask.cli.commands.provision import ProvisionCommand
from leaktask.cli.commands.scan import ScanCommand
from leaktask.cli.commands.status import StatusCommand

__all__ = [
    "ChangesCommand",
    "Command",
    "ProvisionCommand",
    "ScanCommand",
    "StatusCommand",
    "cache_root_from_args",
]
