"""Scanner invocation: run settings and command-line construction."""

from leaktask.scan.arguments import ScanInvocationBuilder, normalize_path_argument
from leaktask.scan.config import ReportFormat, ScanConfig, split_extra_arguments

__all__ = [
    "ReportFormat",
    "ScanConfig",
    "ScanInvocationBuilder",
    "normalize_path_argument",
    "split_extra_arguments",
]
