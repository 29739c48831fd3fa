"""Argument parser construction for the leaktask CLI.

Subcommands:
- leaktask scan      - Provision gitleaks, optionally scope it, run it, report
- leaktask provision - Make sure a gitleaks binary is cached and print its path
- leaktask changes   - Write the commits file for the current build
- leaktask status    - Show platform and tool cache contents
"""

from __future__ import annotations

import argparse

from leaktask.config.models import ConfigType
from leaktask.scan.config import ReportFormat


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show leaktask version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )


def _add_cache_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--cache-dir",
        metavar="DIR",
        help="Tool cache root (default: $LEAKTASK_TOOL_CACHE, $AGENT_TOOLSDIRECTORY or ~/.leaktask/tools).",
    )


def _build_scan_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'scan' subcommand parser.

    Every input option defaults to None so that only flags actually given
    override the environment and the config file.
    """
    scan_parser = subparsers.add_parser(
        "scan",
        help="Run gitleaks as a pipeline task.",
        description=(
            "Download gitleaks if needed, optionally limit it to the commits of "
            "the current build, run it and report the result to the pipeline."
        ),
    )
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Folder to scan (default: the 'scanfolder' input or '.').",
    )
    scan_parser.add_argument(
        "--config",
        metavar="FILE",
        help="YAML file with task inputs (default: .leaktask.yml if present).",
    )
    _add_cache_option(scan_parser)

    tool_group = scan_parser.add_argument_group("scanner")
    tool_group.add_argument(
        "--tool-version",
        dest="tool_version",
        help="gitleaks version to use, or 'latest'.",
    )
    tool_group.add_argument(
        "--config-type",
        choices=[t.value for t in ConfigType],
        help="Which gitleaks config to use.",
    )
    tool_group.add_argument(
        "--config-file",
        help="Custom gitleaks config file (with --config-type custom).",
    )
    tool_group.add_argument(
        "--predefined-config",
        help="Name of a config shipped with leaktask (with --config-type predefined).",
    )
    tool_group.add_argument(
        "--report-format",
        choices=[f.value for f in ReportFormat],
        help="Report format.",
    )
    tool_group.add_argument(
        "--no-git",
        dest="nogit",
        action="store_const",
        const=True,
        default=None,
        help="Treat the folder as plain files instead of a git repository.",
    )
    tool_group.add_argument(
        "--scanner-verbose",
        dest="scanner_verbose",
        action="store_const",
        const=True,
        default=None,
        help="Pass --verbose to gitleaks.",
    )
    tool_group.add_argument(
        "--no-redact",
        dest="redact",
        action="store_const",
        const=False,
        default=None,
        help="Do not redact secrets in gitleaks output.",
    )
    tool_group.add_argument(
        "--arguments",
        help="Extra gitleaks arguments, e.g. \"--threads=4 --leaks-exit-code=1\".",
    )

    scope_group = scan_parser.add_argument_group("change scope")
    scope_group.add_argument(
        "--only-changes",
        dest="scanonlychanges",
        action="store_const",
        const=True,
        default=None,
        help="Only scan the commits of the current build.",
    )
    scope_group.add_argument(
        "--depth",
        type=int,
        help="Commit depth passed to gitleaks together with the commits file.",
    )

    result_group = scan_parser.add_argument_group("result handling")
    result_group.add_argument(
        "--no-upload",
        dest="uploadresults",
        action="store_const",
        const=False,
        default=None,
        help="Do not upload the report as a build artifact.",
    )
    result_group.add_argument(
        "--no-task-fail",
        dest="taskfail",
        action="store_const",
        const=False,
        default=None,
        help="Report findings as 'succeeded with issues' instead of failing.",
    )


def _build_provision_parser(subparsers: argparse._SubParsersAction) -> None:
    provision_parser = subparsers.add_parser(
        "provision",
        help="Download gitleaks into the tool cache and print its path.",
    )
    provision_parser.add_argument(
        "--tool-version",
        dest="tool_version",
        default="latest",
        help="gitleaks version to provision (default: latest).",
    )
    provision_parser.add_argument(
        "--os",
        dest="os_name",
        help="Target operating system (default: agent or host OS).",
    )
    provision_parser.add_argument(
        "--arch",
        dest="arch_name",
        help="Target architecture (default: agent or host architecture).",
    )
    _add_cache_option(provision_parser)


def _build_changes_parser(subparsers: argparse._SubParsersAction) -> None:
    changes_parser = subparsers.add_parser(
        "changes",
        help="Write the commits of the current build to a file and print its path.",
        description="Reads the build from SYSTEM_* / BUILD_* agent variables.",
    )
    changes_parser.add_argument(
        "--build-id",
        help="Build to enumerate (default: $BUILD_BUILDID).",
    )
    changes_parser.add_argument(
        "--output-dir",
        help="Directory for the commits file (default: $AGENT_TEMPDIRECTORY).",
    )


def _build_status_parser(subparsers: argparse._SubParsersAction) -> None:
    status_parser = subparsers.add_parser(
        "status",
        help="Show platform and cached gitleaks versions.",
    )
    _add_cache_option(status_parser)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for leaktask."""
    parser = argparse.ArgumentParser(
        prog="leaktask",
        description="leaktask - run the gitleaks secret scanner as a CI pipeline task.",
    )
    _add_global_options(parser)

    subparsers = parser.add_subparsers(dest="command", title="commands")
    _build_scan_parser(subparsers)
    _build_provision_parser(subparsers)
    _build_changes_parser(subparsers)
    _build_status_parser(subparsers)

    return parser
