"""Release index and asset naming for the scanner.

gitleaks publishes one archive per platform on each GitHub release, plus a
checksums file:

    gitleaks_8.18.2_linux_x64.tar.gz
    gitleaks_8.18.2_windows_x64.zip
    gitleaks_8.18.2_checksums.txt
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.error import HTTPError, URLError

from leaktask.bootstrap.platform import ResolvedPlatform
from leaktask.core.errors import DownloadError, VersionNotFound
from leaktask.core.http import HttpClient
from leaktask.core.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_TOOL_NAME = "gitleaks"
DEFAULT_RELEASE_API_URL = "https://api.github.com/repos/gitleaks/gitleaks/releases"
DEFAULT_DOWNLOAD_BASE_URL = "https://github.com/gitleaks/gitleaks/releases/download"

LATEST = "latest"

_SEMVER_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


def normalize_version(tag: str) -> str:
    """Strip surrounding whitespace and a leading ``v`` from a version tag."""
    tag = tag.strip()
    if tag[:1] in ("v", "V"):
        return tag[1:]
    return tag


def parse_semver(version: str) -> Optional[Tuple[int, int, int]]:
    """Parse ``X.Y.Z`` (optionally ``v``-prefixed) into a comparable tuple."""
    match = _SEMVER_PATTERN.match(normalize_version(version))
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def parse_checksums(text: str) -> Dict[str, str]:
    """Parse a ``sha256sum``-style listing into ``{file name: hex digest}``."""
    checksums: Dict[str, str] = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) != 2:
            continue
        digest, name = parts
        checksums[name.lstrip("*")] = digest.lower()
    return checksums


@dataclass(frozen=True)
class ReleaseAsset:
    """A downloadable archive for one version and platform."""

    version: str
    platform_tag: str
    download_url: str
    archive_format: str

    @property
    def file_name(self) -> str:
        return self.download_url.rsplit("/", 1)[-1]


@dataclass
class ReleaseIndex:
    """Resolves versions and asset URLs for one tool's releases."""

    http: HttpClient
    tool_name: str = DEFAULT_TOOL_NAME
    api_url: str = DEFAULT_RELEASE_API_URL
    download_base_url: str = DEFAULT_DOWNLOAD_BASE_URL

    def asset_for(self, version: str, platform: ResolvedPlatform) -> ReleaseAsset:
        """Build the expected asset for ``version`` on ``platform``."""
        extension = platform.archive_extension
        file_name = f"{self.tool_name}_{version}_{platform.release_tag}{extension}"
        return ReleaseAsset(
            version=version,
            platform_tag=platform.release_tag,
            download_url=f"{self.download_base_url}/v{version}/{file_name}",
            archive_format="zip" if extension == ".zip" else "tar.gz",
        )

    def checksums_url(self, version: str) -> str:
        return f"{self.download_base_url}/v{version}/{self.tool_name}_{version}_checksums.txt"

    async def list_versions(self) -> List[str]:
        """Return the published, non-prerelease version tags (normalized)."""
        url = f"{self.api_url}?per_page=100"
        try:
            response = await self.http.get(url, headers={"Accept": "application/vnd.github+json"})
        except HTTPError as e:
            raise DownloadError(url, str(e.reason), status=e.code) from e
        except URLError as e:
            raise DownloadError(url, str(e.reason)) from e

        try:
            releases = response.json()
        except ValueError as e:
            raise DownloadError(url, f"invalid release index: {e}") from e

        versions: List[str] = []
        for release in releases if isinstance(releases, list) else []:
            if release.get("draft") or release.get("prerelease"):
                continue
            tag = release.get("tag_name")
            if tag:
                versions.append(normalize_version(tag))
        return versions

    async def latest_version(self) -> str:
        """Resolve the newest published semantic version.

        Raises:
            VersionNotFound: If the index lists no usable version.
            DownloadError: If the index cannot be fetched.
        """
        candidates = [v for v in await self.list_versions() if parse_semver(v) is not None]
        if not candidates:
            raise VersionNotFound(self.tool_name, LATEST, "release index lists no versions")
        latest = max(candidates, key=lambda v: parse_semver(v))
        LOGGER.info(f"Resolved {self.tool_name} 'latest' to {latest}")
        return latest
