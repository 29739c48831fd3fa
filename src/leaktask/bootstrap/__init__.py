"""Scanner binary provisioning.

This package handles:
- Platform resolution (agent OS + architecture to release naming)
- The shared tool cache (~/.leaktask/tools or the agent tools directory)
- Release index queries, downloads, verification and atomic publication
"""

from leaktask.bootstrap.paths import ToolCachePaths, get_tool_cache_root
from leaktask.bootstrap.platform import ResolvedPlatform, detect_platform, resolve_platform
from leaktask.bootstrap.provisioner import CacheEntry, ToolDescriptor, ToolProvisioner
from leaktask.bootstrap.releases import ReleaseAsset, ReleaseIndex

__all__ = [
    "CacheEntry",
    "ReleaseAsset",
    "ReleaseIndex",
    "ResolvedPlatform",
    "ToolCachePaths",
    "ToolDescriptor",
    "ToolProvisioner",
    "detect_platform",
    "get_tool_cache_root",
    "resolve_platform",
]
