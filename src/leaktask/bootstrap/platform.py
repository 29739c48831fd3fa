"""Platform resolution for scanner release assets.

Maps the OS/architecture strings reported by a build agent (or by the
``platform`` module) onto the canonical tokens gitleaks uses to name its
release archives.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from leaktask.core.errors import UnsupportedPlatform

# OS aliases, lowercase. Agent.OS reports Linux / Darwin / Windows_NT.
_OS_MAP: Dict[str, str] = {
    "linux": "linux",
    "darwin": "darwin",
    "macos": "darwin",
    "osx": "darwin",
    "windows": "windows",
    "windows_nt": "windows",
    "win32": "windows",
}

# Architecture aliases, lowercase. Agent.OSArchitecture reports X86 / X64 / ARM / ARM64.
_ARCH_MAP: Dict[str, str] = {
    "x64": "amd64",
    "x86_64": "amd64",
    "amd64": "amd64",
    "x86": "386",
    "x32": "386",
    "i386": "386",
    "i686": "386",
    "386": "386",
    "arm64": "arm64",
    "aarch64": "arm64",
    "arm": "arm",
    "armv7": "arm",
    "armv7l": "arm",
}

# Pairs for which a release archive is published
SUPPORTED_PLATFORMS: FrozenSet[tuple] = frozenset({
    ("linux", "amd64"),
    ("linux", "arm64"),
    ("linux", "386"),
    ("linux", "arm"),
    ("darwin", "amd64"),
    ("darwin", "arm64"),
    ("windows", "amd64"),
    ("windows", "386"),
})

# Canonical architecture → token used in asset names
_RELEASE_ARCH: Dict[str, str] = {
    "amd64": "x64",
    "386": "x32",
    "arm64": "arm64",
    "arm": "armv7",
}


def normalize_os(name: str) -> Optional[str]:
    """Normalize an operating system name, or return None if unknown."""
    return _OS_MAP.get(name.strip().lower())


def normalize_arch(machine: str) -> Optional[str]:
    """Normalize an architecture name, or return None if unknown."""
    return _ARCH_MAP.get(machine.strip().lower())


@dataclass(frozen=True)
class ResolvedPlatform:
    """Canonical platform tokens.

    Attributes:
        os_tag: Operating system (linux, darwin, windows).
        arch_tag: CPU architecture (amd64, arm64, 386, arm).
    """

    os_tag: str
    arch_tag: str

    @property
    def key(self) -> str:
        """Cache key component, e.g. ``linux-amd64``."""
        return f"{self.os_tag}-{self.arch_tag}"

    @property
    def release_tag(self) -> str:
        """Token used in release asset names, e.g. ``linux_x64``."""
        return f"{self.os_tag}_{_RELEASE_ARCH[self.arch_tag]}"

    @property
    def is_windows(self) -> bool:
        return self.os_tag == "windows"

    @property
    def archive_extension(self) -> str:
        return ".zip" if self.is_windows else ".tar.gz"

    def executable_name(self, tool_name: str) -> str:
        return f"{tool_name}.exe" if self.is_windows else tool_name


def resolve_platform(os_name: str, arch_name: str) -> ResolvedPlatform:
    """Resolve raw OS/architecture strings to a ResolvedPlatform.

    Raises:
        UnsupportedPlatform: If either value is unknown or the pair has no
            published release.
    """
    os_tag = normalize_os(os_name)
    arch_tag = normalize_arch(arch_name)
    if os_tag is None or arch_tag is None or (os_tag, arch_tag) not in SUPPORTED_PLATFORMS:
        raise UnsupportedPlatform(os_name, arch_name)
    return ResolvedPlatform(os_tag=os_tag, arch_tag=arch_tag)


def detect_platform() -> ResolvedPlatform:
    """Resolve the platform of the running interpreter."""
    return resolve_platform(platform.system(), platform.machine())
