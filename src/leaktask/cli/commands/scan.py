"""Scan command implementation."""

from __future__ import annotations

import asyncio
from argparse import Namespace
from pathlib import Path
from typing import Any, Dict

from leaktask.bootstrap.provisioner import ToolProvisioner
from leaktask.changes.models import BuildContext
from leaktask.cli.commands import Command, cache_root_from_args
from leaktask.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SCAN_FAILED, EXIT_SUCCESS
from leaktask.config.loader import ConfigError, load_task_inputs
from leaktask.core.logging import get_logger
from leaktask.pipeline.orchestrator import AgentInfo, ScanOrchestrator
from leaktask.pipeline.reporting import PipelineReporter, TaskResult

LOGGER = get_logger(__name__)


def cli_overrides(args: Namespace) -> Dict[str, Any]:
    """Map scan flags onto task input names (unset flags are None)."""
    return {
        "scanfolder": args.path,
        "version": args.tool_version,
        "configtype": args.config_type,
        "configfile": args.config_file,
        "predefinedconfigfile": args.predefined_config,
        "reportformat": args.report_format,
        "nogit": args.nogit,
        "verbose": args.scanner_verbose,
        "redact": args.redact,
        "arguments": args.arguments,
        "scanonlychanges": args.scanonlychanges,
        "depth": args.depth,
        "uploadresults": args.uploadresults,
        "taskfail": args.taskfail,
    }


class ScanCommand(Command):
    """Runs gitleaks as a pipeline task."""

    def __init__(self, version: str):
        self._version = version

    @property
    def name(self) -> str:
        return "scan"

    def execute(self, args: Namespace) -> int:
        reporter = PipelineReporter()
        try:
            inputs = load_task_inputs(
                Path.cwd(),
                config_path=Path(args.config) if args.config else None,
                cli_overrides=cli_overrides(args),
            )
        except ConfigError as e:
            LOGGER.error(str(e))
            reporter.complete(TaskResult.FAILED, str(e))
            return EXIT_INVALID_USAGE

        orchestrator = ScanOrchestrator(
            provisioner=ToolProvisioner(cache_root_from_args(args)),
            reporter=reporter,
        )
        outcome = asyncio.run(
            orchestrator.run(inputs, AgentInfo.from_environment(), BuildContext.from_environment())
        )

        if outcome.result == TaskResult.FAILED:
            return EXIT_SCAN_FAILED
        return EXIT_SUCCESS
