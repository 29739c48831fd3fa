"""CLI runner orchestration.

This module handles command dispatch and execution for the leaktask CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from typing import Dict, Iterable, Optional

from leaktask.cli.arguments import build_parser
from leaktask.cli.commands import (
    ChangesCommand,
    Command,
    ProvisionCommand,
    ScanCommand,
    StatusCommand,
)
from leaktask.cli.exit_codes import EXIT_SUCCESS
from leaktask.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get leaktask version from package metadata or the package itself."""
    try:
        return version("leaktask")
    except PackageNotFoundError:
        # Running from a source checkout without installed metadata.
        from leaktask import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self) -> None:
        self.parser = build_parser()
        self._version = get_version()
        self.commands: Dict[str, Command] = {
            command.name: command
            for command in (
                ScanCommand(version=self._version),
                ProvisionCommand(),
                ChangesCommand(),
                StatusCommand(version=self._version),
            )
        }

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        argv_list = list(argv) if argv is not None else None
        args = self.parser.parse_args(argv_list)

        # Configure logging as early as possible
        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command = self.commands.get(getattr(args, "command", None) or "")
        if command is None:
            self.parser.print_help()
            return EXIT_SUCCESS

        LOGGER.debug(f"Running command: {command.name}")
        return command.execute(args)
