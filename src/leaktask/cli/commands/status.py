"""Status command implementation."""

from __future__ import annotations

from argparse import Namespace

from leaktask.bootstrap.platform import resolve_platform
from leaktask.bootstrap.provisioner import ToolProvisioner
from leaktask.cli.commands import Command, cache_root_from_args
from leaktask.cli.exit_codes import EXIT_SUCCESS
from leaktask.core.errors import UnsupportedPlatform
from leaktask.pipeline.orchestrator import DEFAULT_TOOL_NAME, PREDEFINED_CONFIG_DIR, AgentInfo


class StatusCommand(Command):
    """Shows platform resolution and tool cache contents."""

    def __init__(self, version: str):
        self._version = version

    @property
    def name(self) -> str:
        return "status"

    def execute(self, args: Namespace) -> int:
        """Print leaktask version, platform and cached scanner versions.

        Returns:
            Exit code (always 0 for status).
        """
        agent = AgentInfo.from_environment()
        cache_root = cache_root_from_args(args)

        print(f"leaktask version: {self._version}")
        try:
            resolved = resolve_platform(agent.operating_system, agent.architecture)
            print(f"Platform: {resolved.key} (release tag {resolved.release_tag})")
        except UnsupportedPlatform as e:
            print(f"Platform: {agent.operating_system}-{agent.architecture} ({e})")
        print(f"Tool cache: {cache_root}")
        print()

        entries = ToolProvisioner(cache_root).cached_entries(DEFAULT_TOOL_NAME)
        print(f"Cached {DEFAULT_TOOL_NAME} versions:")
        if entries:
            for entry in entries:
                print(f"  {entry.version} [{entry.platform}] {entry.local_path}")
        else:
            print("  (none)")

        print()
        print("Predefined configs:")
        for config in sorted(PREDEFINED_CONFIG_DIR.glob("*.toml")):
            print(f"  {config.name}")

        return EXIT_SUCCESS
