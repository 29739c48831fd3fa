"""Changes command implementation."""

from __future__ import annotations

import asyncio
import dataclasses
from argparse import Namespace
from pathlib import Path

from leaktask.changes.models import BuildContext
from leaktask.changes.resolver import ChangeSetResolver
from leaktask.cli.commands import Command
from leaktask.cli.exit_codes import EXIT_SUCCESS, EXIT_TOOLING_ERROR
from leaktask.core.errors import ChangeScopeError
from leaktask.core.logging import get_logger

LOGGER = get_logger(__name__)


class ChangesCommand(Command):
    """Writes the commits of the current build to a scope file."""

    @property
    def name(self) -> str:
        return "changes"

    def execute(self, args: Namespace) -> int:
        context = BuildContext.from_environment()
        if args.build_id:
            context = dataclasses.replace(context, build_id=args.build_id)
        if args.output_dir:
            context = dataclasses.replace(context, temp_dir=Path(args.output_dir))

        try:
            scope_file = asyncio.run(ChangeSetResolver().resolve_changes(context))
        except ChangeScopeError as e:
            LOGGER.error(str(e))
            return EXIT_TOOLING_ERROR

        print(scope_file)
        return EXIT_SUCCESS
