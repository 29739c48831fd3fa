"""Provision command implementation."""

from __future__ import annotations

import asyncio
from argparse import Namespace

from leaktask.bootstrap.provisioner import ToolDescriptor, ToolProvisioner
from leaktask.cli.commands import Command, cache_root_from_args
from leaktask.cli.exit_codes import EXIT_SUCCESS, EXIT_TOOLING_ERROR
from leaktask.core.errors import ProvisioningError
from leaktask.core.logging import get_logger
from leaktask.pipeline.orchestrator import DEFAULT_TOOL_NAME, AgentInfo

LOGGER = get_logger(__name__)


class ProvisionCommand(Command):
    """Ensures a gitleaks binary is cached and prints its path."""

    @property
    def name(self) -> str:
        return "provision"

    def execute(self, args: Namespace) -> int:
        agent = AgentInfo.from_environment()
        descriptor = ToolDescriptor(
            name=DEFAULT_TOOL_NAME,
            requested_version=args.tool_version,
            operating_system=args.os_name or agent.operating_system,
            architecture=args.arch_name or agent.architecture,
        )
        provisioner = ToolProvisioner(cache_root_from_args(args))
        try:
            binary = asyncio.run(provisioner.provision(descriptor))
        except ProvisioningError as e:
            LOGGER.error(str(e))
            return EXIT_TOOLING_ERROR

        print(binary)
        return EXIT_SUCCESS
