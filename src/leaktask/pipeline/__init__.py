"""Task orchestration and pipeline result reporting."""

from leaktask.pipeline.orchestrator import AgentInfo, ScanOrchestrator, TaskOutcome
from leaktask.pipeline.reporting import PipelineReporter, TaskResult

__all__ = ["AgentInfo", "PipelineReporter", "ScanOrchestrator", "TaskOutcome", "TaskResult"]
