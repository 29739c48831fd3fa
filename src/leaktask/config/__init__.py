"""Task input configuration."""

from leaktask.config.loader import ConfigError, load_task_inputs
from leaktask.config.models import ConfigType, TaskInputs

__all__ = ["ConfigError", "ConfigType", "TaskInputs", "load_task_inputs"]
