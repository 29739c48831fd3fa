"""Error taxonomy for leaktask.

Errors are grouped by the stage that raises them. Every stage error is
fatal to the run: the orchestrator reports it and never starts the scanner.
"""

from __future__ import annotations

from typing import Optional, Tuple


class LeakTaskError(Exception):
    """Base error for all fatal task failures."""

    stage = "task"

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


# Provisioning stage


class ProvisioningError(LeakTaskError):
    """A scanner binary could not be made available."""

    stage = "provisioning"


class UnsupportedPlatform(ProvisioningError):
    """No release naming exists for the given OS/architecture pair."""

    def __init__(self, os_name: str, arch_name: str) -> None:
        self.os_name = os_name
        self.arch_name = arch_name
        super().__init__(f"Unsupported platform: os={os_name!r} arch={arch_name!r}")


class VersionNotFound(ProvisioningError):
    """The requested version has no matching published asset."""

    def __init__(self, tool_name: str, version: str, detail: str = "") -> None:
        self.tool_name = tool_name
        self.version = version
        message = f"No published release of {tool_name} matches version {version!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DownloadError(ProvisioningError):
    """Network or HTTP failure while fetching release data."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        self.url = url
        self.status = status
        prefix = f"HTTP {status}" if status is not None else "network error"
        super().__init__(f"Download of {url} failed ({prefix}): {reason}")


class IntegrityError(ProvisioningError):
    """A downloaded asset failed checksum verification."""

    def __init__(self, cache_key: Tuple[str, str, str], message: str) -> None:
        self.cache_key = cache_key
        super().__init__(f"{message} (cache key {'/'.join(cache_key)})")


class CacheError(ProvisioningError):
    """The tool cache could not be written."""

    def __init__(self, cache_key: Tuple[str, str, str], message: str) -> None:
        self.cache_key = cache_key
        super().__init__(f"{message} (cache key {'/'.join(cache_key)})")


# Change-scope stage


class ChangeScopeError(LeakTaskError):
    """The changes of the current build could not be enumerated."""

    stage = "change-scope"

    def __init__(self, message: str, url: str = "", status: Optional[int] = None) -> None:
        self.url = url
        self.status = status
        super().__init__(message)


class APIAuthError(ChangeScopeError):
    """The access token lacks permission to read build changes."""


class APIUnavailable(ChangeScopeError):
    """The build API is unreachable or answered with an error."""
