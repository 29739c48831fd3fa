"""Command-line construction for the scanner.

The argument order is fixed because the scanner's flag parser is order
sensitive for repeated flags:

    --path, --report, --format, config selector, --no-git, --verbose,
    --redact, --commits-file, --depth, pass-through arguments
"""

from __future__ import annotations

from typing import List, Optional

from leaktask.scan.config import ScanConfig


def normalize_path_argument(path: str) -> str:
    """Use forward slashes on every host; the scanner's TOML loader chokes on backslashes."""
    return str(path).replace("\\", "/")


class ScanInvocationBuilder:
    """Builds the scanner argument list from a ScanConfig. Performs no I/O."""

    CONFIG_FLAG = "--config-path"

    def config_argument(self, config: ScanConfig) -> Optional[str]:
        """Select the config flag.

        An explicit custom file wins over a predefined config; with neither,
        no flag is passed and the scanner uses its built-in rules.
        """
        if config.custom_config_file:
            return f"{self.CONFIG_FLAG}={normalize_path_argument(config.custom_config_file)}"
        if config.predefined_config_file:
            return f"{self.CONFIG_FLAG}={normalize_path_argument(config.predefined_config_file)}"
        return None

    def build(self, config: ScanConfig) -> List[str]:
        args = [
            f"--path={normalize_path_argument(config.scan_root)}",
            f"--report={normalize_path_argument(config.report_path)}",
            f"--format={config.report_format.value}",
        ]
        config_arg = self.config_argument(config)
        if config_arg:
            args.append(config_arg)
        if config.no_git:
            args.append("--no-git")
        if config.verbose:
            args.append("--verbose")
        if config.redact:
            args.append("--redact")
        if config.scope_file:
            args.append(f"--commits-file={normalize_path_argument(config.scope_file)}")
            if config.depth is not None:
                args.append(f"--depth={config.depth}")
        args.extend(config.extra_args)
        return args
