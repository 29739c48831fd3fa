"""End-to-end task run: provision, scope, invoke, report.

Provisioning and change-scope failures end the run before the scanner is
started; scanning without a requested scope would silently widen it.
"""

from __future__ import annotations

import os
import platform
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, List, Mapping, Optional

from leaktask.bootstrap.provisioner import ToolDescriptor, ToolProvisioner
from leaktask.changes.models import BuildContext
from leaktask.changes.resolver import ChangeSetResolver
from leaktask.config.loader import ConfigError
from leaktask.config.models import ConfigType, TaskInputs
from leaktask.core.errors import LeakTaskError
from leaktask.core.logging import get_logger
from leaktask.core.subprocess_runner import run_tool
from leaktask.pipeline.reporting import PipelineReporter, TaskResult
from leaktask.scan.arguments import ScanInvocationBuilder
from leaktask.scan.config import ScanConfig, report_file_path, split_extra_arguments

LOGGER = get_logger(__name__)

DEFAULT_TOOL_NAME = "gitleaks"

# Config files shipped with leaktask, selectable by name
PREDEFINED_CONFIG_DIR = Path(__file__).resolve().parent.parent / "configs"

ToolRunner = Callable[[List[str]], Awaitable[int]]


@dataclass(frozen=True)
class AgentInfo:
    """The build agent the task runs on."""

    operating_system: str
    architecture: str
    temp_dir: Path

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "AgentInfo":
        """Read Agent.OS / Agent.OSArchitecture / Agent.TempDirectory, falling back to the host."""
        env = os.environ if environ is None else environ
        temp_dir = env.get("AGENT_TEMPDIRECTORY")
        return cls(
            operating_system=env.get("AGENT_OS") or platform.system(),
            architecture=env.get("AGENT_OSARCHITECTURE") or platform.machine(),
            temp_dir=Path(temp_dir) if temp_dir else Path(tempfile.gettempdir()),
        )


@dataclass
class TaskOutcome:
    """What a run ended with."""

    result: TaskResult
    message: str
    exit_code: Optional[int] = None
    report_path: Optional[Path] = None
    arguments: List[str] = field(default_factory=list)


def resolve_predefined_config(name: str, config_dir: Path = PREDEFINED_CONFIG_DIR) -> Path:
    """Return the path of a shipped config file.

    Raises:
        ConfigError: If no shipped config has that name.
    """
    candidate = (config_dir / name).resolve()
    if candidate.parent != config_dir.resolve() or not candidate.is_file():
        available = sorted(p.name for p in config_dir.glob("*.toml"))
        raise ConfigError(
            f"Unknown predefined config '{name}'. Available: {', '.join(available) or 'none'}"
        )
    return candidate


class ScanOrchestrator:
    """Runs one scan from task inputs to a pipeline result."""

    def __init__(
        self,
        provisioner: ToolProvisioner,
        resolver: Optional[ChangeSetResolver] = None,
        reporter: Optional[PipelineReporter] = None,
        builder: Optional[ScanInvocationBuilder] = None,
        tool_runner: ToolRunner = run_tool,
        tool_name: str = DEFAULT_TOOL_NAME,
        predefined_config_dir: Path = PREDEFINED_CONFIG_DIR,
    ) -> None:
        self._provisioner = provisioner
        self._resolver = resolver or ChangeSetResolver()
        self._reporter = reporter or PipelineReporter()
        self._builder = builder or ScanInvocationBuilder()
        self._tool_runner = tool_runner
        self._tool_name = tool_name
        self._predefined_config_dir = predefined_config_dir

    async def run(self, inputs: TaskInputs, agent: AgentInfo, build: Optional[BuildContext] = None) -> TaskOutcome:
        """Run the task and report its result to the pipeline."""
        try:
            outcome = await self._run(inputs, agent, build)
        except (LeakTaskError, ConfigError) as e:
            LOGGER.error(str(e))
            self._reporter.log_issue(str(e))
            outcome = TaskOutcome(result=TaskResult.FAILED, message=str(e))

        self._reporter.complete(outcome.result, outcome.message)
        return outcome

    def build_scan_config(
        self,
        inputs: TaskInputs,
        agent: AgentInfo,
        scope_file: Optional[Path] = None,
    ) -> ScanConfig:
        custom_config = None
        predefined_config = None
        if inputs.configtype == ConfigType.CUSTOM:
            custom_config = inputs.configfile
        elif inputs.configtype == ConfigType.PREDEFINED and inputs.predefinedconfigfile:
            predefined_config = str(
                resolve_predefined_config(inputs.predefinedconfigfile, self._predefined_config_dir)
            )

        return ScanConfig(
            scan_root=inputs.scanfolder,
            report_path=str(report_file_path(agent.temp_dir, inputs.reportformat)),
            report_format=inputs.reportformat,
            custom_config_file=custom_config,
            predefined_config_file=predefined_config,
            scope_file=str(scope_file) if scope_file else None,
            depth=inputs.depth if scope_file else None,
            extra_args=tuple(split_extra_arguments(inputs.arguments)),
            no_git=inputs.nogit,
            verbose=inputs.verbose,
            redact=inputs.redact,
        )

    async def _run(self, inputs: TaskInputs, agent: AgentInfo, build: Optional[BuildContext]) -> TaskOutcome:
        # Fail on bad config before spending time on downloads
        self.build_scan_config(inputs, agent)

        descriptor = ToolDescriptor(
            name=self._tool_name,
            requested_version=inputs.version,
            operating_system=agent.operating_system,
            architecture=agent.architecture,
        )
        binary = await self._provisioner.provision(descriptor)

        scope_file = None
        if inputs.scanonlychanges:
            context = build or BuildContext.from_environment()
            scope_file = await self._resolver.resolve_changes(context)

        scan_config = self.build_scan_config(inputs, agent, scope_file)
        arguments = self._builder.build(scan_config)
        LOGGER.debug(f"Scan folder: {scan_config.scan_root}")
        LOGGER.debug(f"Report path: {scan_config.report_path}")

        try:
            exit_code = await self._tool_runner([str(binary), *arguments])
        except OSError as e:
            return TaskOutcome(
                result=TaskResult.FAILED,
                message=f"Could not start {binary}: {e}",
                arguments=arguments,
            )

        report_path = Path(scan_config.report_path)
        if exit_code == 0:
            return TaskOutcome(
                result=TaskResult.SUCCEEDED,
                message="No leaks found",
                exit_code=exit_code,
                report_path=report_path,
                arguments=arguments,
            )

        if inputs.uploadresults and report_path.exists():
            container = scan_config.report_format.artifact_container
            self._reporter.upload_artifact(container, report_path)

        result = TaskResult.FAILED if inputs.taskfail else TaskResult.SUCCEEDED_WITH_ISSUES
        return TaskOutcome(
            result=result,
            message=f"Leaks or errors found (exit code {exit_code})",
            exit_code=exit_code,
            report_path=report_path,
            arguments=arguments,
        )
