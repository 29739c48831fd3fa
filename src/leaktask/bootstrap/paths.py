"""Path management for the scanner tool cache.

The cache is shared between every job that runs on the same agent, so
nothing in it is ever written in place: entries are staged next to their
final location and renamed into it.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Mapping, Optional

# Default directory under user home
DEFAULT_HOME_DIR_NAME = ".leaktask"

# Environment variable to override the cache root
LEAKTASK_TOOL_CACHE_ENV = "LEAKTASK_TOOL_CACHE"

# Tool directory provided by pipeline agents
AGENT_TOOLS_DIRECTORY_ENV = "AGENT_TOOLSDIRECTORY"


def get_tool_cache_root(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Get the tool cache root directory.

    Resolution order:
    1. LEAKTASK_TOOL_CACHE environment variable (if set)
    2. AGENT_TOOLSDIRECTORY (set on pipeline agents)
    3. ~/.leaktask/tools (default)
    """
    env = os.environ if environ is None else environ
    for name in (LEAKTASK_TOOL_CACHE_ENV, AGENT_TOOLS_DIRECTORY_ENV):
        value = env.get(name)
        if value:
            return Path(value)
    return Path.home() / DEFAULT_HOME_DIR_NAME / "tools"


@dataclass(frozen=True)
class ToolCachePaths:
    """Layout of the tool cache.

    Directory structure:
        <root>/
            gitleaks/
                8.18.2/
                    linux-amd64/gitleaks   - published entry
                .staging/
                    <random>/              - in-flight extraction
                .trash/
                    <random>/              - corrupt entries being removed
    """

    root: Path

    _STAGING_DIR: ClassVar[str] = ".staging"
    _TRASH_DIR: ClassVar[str] = ".trash"

    @classmethod
    def default(cls) -> "ToolCachePaths":
        return cls(get_tool_cache_root())

    def tool_dir(self, tool_name: str) -> Path:
        return self.root / tool_name

    def entry_dir(self, tool_name: str, version: str, platform_key: str) -> Path:
        """Directory holding the published entry for one cache key."""
        return self.root / tool_name / version / platform_key

    def new_staging_dir(self, tool_name: str) -> Path:
        """Create and return a uniquely named staging directory.

        Staging lives under the tool directory so the final rename never
        crosses a filesystem boundary.
        """
        staging = self.tool_dir(tool_name) / self._STAGING_DIR / uuid.uuid4().hex
        staging.mkdir(parents=True)
        return staging

    def new_trash_dir(self, tool_name: str) -> Path:
        """Return an unused path to move a discarded entry into."""
        trash_parent = self.tool_dir(tool_name) / self._TRASH_DIR
        trash_parent.mkdir(parents=True, exist_ok=True)
        return trash_parent / uuid.uuid4().hex

    def is_internal(self, name: str) -> bool:
        """True for bookkeeping directories that are not versions."""
        return name in (self._STAGING_DIR, self._TRASH_DIR)
