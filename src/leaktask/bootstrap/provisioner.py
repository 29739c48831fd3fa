"""Scanner provisioning: version resolution, cache lookup, download.

Provisioning is a two-step pipeline. The requested version is first
resolved to a concrete one ("latest" asks the release index, once per
call, and is never persisted); everything after that is keyed by the
resolved version and therefore cacheable.

Cache entries are published by renaming a fully extracted staging
directory into place, so an interrupted download never leaves a partial
entry under a cache key, and two jobs racing on the same key both end up
with an identical, complete entry.
"""

from __future__ import annotations

import asyncio
import hashlib
import os
import shutil
import tarfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.error import HTTPError, URLError

from leaktask.bootstrap.paths import ToolCachePaths
from leaktask.bootstrap.platform import ResolvedPlatform, resolve_platform
from leaktask.bootstrap.releases import (
    LATEST,
    ReleaseAsset,
    ReleaseIndex,
    normalize_version,
    parse_checksums,
)
from leaktask.bootstrap.validation import ToolStatus, validate_binary
from leaktask.core.errors import CacheError, DownloadError, IntegrityError, VersionNotFound
from leaktask.core.http import HttpClient
from leaktask.core.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ToolDescriptor:
    """What to provision: a tool, a requested version, and the agent platform."""

    name: str
    requested_version: str
    operating_system: str
    architecture: str


@dataclass(frozen=True)
class CacheEntry:
    """A published binary in the tool cache."""

    tool_name: str
    version: str
    platform: str
    local_path: Path

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.tool_name, self.version, self.platform)


class ToolProvisioner:
    """Returns a ready-to-run scanner binary, downloading it on cache miss.

    Args:
        cache_root: Root of the shared tool cache.
        http: HTTP client for the release endpoints.
        release_index: Release index to use; defaults to the gitleaks
            GitHub releases.
    """

    def __init__(
        self,
        cache_root: Path,
        http: Optional[HttpClient] = None,
        release_index: Optional[ReleaseIndex] = None,
    ) -> None:
        self._paths = ToolCachePaths(Path(cache_root))
        self._http = http or HttpClient()
        self._release_index = release_index

    @property
    def paths(self) -> ToolCachePaths:
        return self._paths

    def _index_for(self, tool_name: str) -> ReleaseIndex:
        if self._release_index is not None:
            return self._release_index
        return ReleaseIndex(self._http, tool_name=tool_name)

    async def provision(self, descriptor: ToolDescriptor) -> Path:
        """Return the path of an executable for ``descriptor``.

        Raises:
            UnsupportedPlatform: If the agent platform has no release.
            VersionNotFound: If the version has no published asset.
            DownloadError: If a release endpoint cannot be reached.
            IntegrityError: If the asset fails verification.
        """
        platform = resolve_platform(descriptor.operating_system, descriptor.architecture)
        index = self._index_for(descriptor.name)
        version = await self.resolve_version(index, descriptor.requested_version)

        entry = self.lookup(descriptor.name, version, platform)
        if entry is not None:
            LOGGER.info(f"Using cached {descriptor.name} {version} at {entry.local_path}")
            return entry.local_path

        LOGGER.info(f"{descriptor.name} {version} ({platform.key}) not cached, downloading...")
        return await self._install(descriptor.name, version, platform, index)

    async def resolve_version(self, index: ReleaseIndex, requested: str) -> str:
        """Turn a requested version into a concrete one."""
        requested = requested.strip() or LATEST
        if requested.lower() == LATEST:
            return await index.latest_version()
        return normalize_version(requested)

    def lookup(self, tool_name: str, version: str, platform: ResolvedPlatform) -> Optional[CacheEntry]:
        """Return the cache entry for a key, or None when absent or unusable."""
        entry_dir = self._paths.entry_dir(tool_name, version, platform.key)
        binary = entry_dir / platform.executable_name(tool_name)
        status = validate_binary(binary, require_exec_bit=not platform.is_windows)
        if status != ToolStatus.PRESENT:
            if entry_dir.exists():
                LOGGER.warning(f"Ignoring unusable cache entry {entry_dir} ({status.value})")
            return None
        return CacheEntry(tool_name, version, platform.key, binary)

    def cached_entries(self, tool_name: str) -> List[CacheEntry]:
        """List usable cache entries for a tool, sorted by version then platform."""
        entries: List[CacheEntry] = []
        tool_dir = self._paths.tool_dir(tool_name)
        if not tool_dir.is_dir():
            return entries
        for version_dir in sorted(tool_dir.iterdir()):
            if not version_dir.is_dir() or self._paths.is_internal(version_dir.name):
                continue
            for platform_dir in sorted(version_dir.iterdir()):
                if not platform_dir.is_dir():
                    continue
                os_tag, _, arch_tag = platform_dir.name.partition("-")
                platform = ResolvedPlatform(os_tag=os_tag, arch_tag=arch_tag)
                binary = platform_dir / platform.executable_name(tool_name)
                if validate_binary(binary, require_exec_bit=not platform.is_windows) == ToolStatus.PRESENT:
                    entries.append(CacheEntry(tool_name, version_dir.name, platform_dir.name, binary))
        return entries

    async def _install(
        self, tool_name: str, version: str, platform: ResolvedPlatform, index: ReleaseIndex
    ) -> Path:
        asset = index.asset_for(version, platform)
        key = (tool_name, version, platform.key)

        archive = await self._download_asset(tool_name, asset)
        expected = await self._published_checksum(index, asset, key)
        if expected is None:
            LOGGER.warning(f"No checksum published for {asset.file_name}; skipping verification")
        else:
            actual = hashlib.sha256(archive).hexdigest()
            if actual != expected:
                raise IntegrityError(
                    key, f"Checksum mismatch for {asset.file_name}: expected {expected}, got {actual}"
                )
            LOGGER.debug(f"Checksum verified for {asset.file_name}")

        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, self._publish, archive, asset, platform, key)
        except OSError as e:
            raise CacheError(key, f"Could not write to tool cache {self._paths.root}: {e}") from e

    async def _download_asset(self, tool_name: str, asset: ReleaseAsset) -> bytes:
        LOGGER.debug(f"Downloading from {asset.download_url}")
        try:
            response = await self._http.get(asset.download_url)
        except HTTPError as e:
            if e.code == 404:
                raise VersionNotFound(
                    tool_name, asset.version, f"no asset {asset.file_name}"
                ) from e
            raise DownloadError(asset.download_url, str(e.reason), status=e.code) from e
        except URLError as e:
            raise DownloadError(asset.download_url, str(e.reason)) from e

        if not response.body:
            raise DownloadError(asset.download_url, "empty response body", status=response.status)
        LOGGER.info(f"Downloaded {asset.file_name} ({len(response.body) / 1024 / 1024:.1f} MB)")
        return response.body

    async def _published_checksum(
        self, index: ReleaseIndex, asset: ReleaseAsset, key: Tuple[str, str, str]
    ) -> Optional[str]:
        """Return the published sha256 of ``asset``, or None if the release has none."""
        url = index.checksums_url(asset.version)
        try:
            response = await self._http.get(url)
        except HTTPError as e:
            if e.code == 404:
                return None
            raise DownloadError(url, str(e.reason), status=e.code) from e
        except URLError as e:
            raise DownloadError(url, str(e.reason)) from e

        checksums = parse_checksums(response.body.decode("utf-8", errors="replace"))
        if asset.file_name not in checksums:
            raise IntegrityError(
                key,
                f"{asset.file_name} is not listed in the published checksums",
            )
        return checksums[asset.file_name]

    def _publish(
        self,
        archive: bytes,
        asset: ReleaseAsset,
        platform: ResolvedPlatform,
        key: Tuple[str, str, str],
    ) -> Path:
        """Extract into a staging directory and rename it into the cache."""
        tool_name, version, platform_key = key
        binary_name = platform.executable_name(tool_name)
        staging = self._paths.new_staging_dir(tool_name)
        try:
            archive_path = staging / asset.file_name
            archive_path.write_bytes(archive)
            try:
                if asset.archive_format == "zip":
                    _extract_zip(archive_path, staging)
                else:
                    _extract_tarball(archive_path, staging)
            except (tarfile.TarError, zipfile.BadZipFile) as e:
                raise IntegrityError(key, f"Corrupt archive {asset.file_name}: {e}") from e
            finally:
                archive_path.unlink(missing_ok=True)

            staged_binary = staging / binary_name
            if not staged_binary.is_file():
                raise IntegrityError(key, f"{asset.file_name} does not contain {binary_name}")
            if not platform.is_windows:
                staged_binary.chmod(staged_binary.stat().st_mode | 0o755)

            entry_dir = self._paths.entry_dir(tool_name, version, platform_key)
            self._rename_into_place(staging, entry_dir, tool_name, platform)
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)

        binary = entry_dir / binary_name
        LOGGER.info(f"{tool_name} {version} installed to {binary}")
        return binary

    def _rename_into_place(
        self, staging: Path, entry_dir: Path, tool_name: str, platform: ResolvedPlatform
    ) -> None:
        """Move ``staging`` to ``entry_dir`` unless a usable entry is already there.

        The staging directory is left in place when the existing entry wins;
        the caller removes it.
        """
        entry_dir.parent.mkdir(parents=True, exist_ok=True)
        if entry_dir.exists():
            existing = entry_dir / platform.executable_name(tool_name)
            if validate_binary(existing, require_exec_bit=not platform.is_windows) == ToolStatus.PRESENT:
                LOGGER.debug(f"{entry_dir} was published concurrently, discarding staged copy")
                return
            # Left over from an earlier failed run.
            trash = self._paths.new_trash_dir(tool_name)
            try:
                os.replace(entry_dir, trash)
            except FileNotFoundError:
                pass
            else:
                shutil.rmtree(trash, ignore_errors=True)
        try:
            os.replace(staging, entry_dir)
        except OSError:
            # A concurrent job published the same key first; its content is identical.
            if not entry_dir.is_dir() or not any(entry_dir.iterdir()):
                raise
            LOGGER.debug(f"{entry_dir} was published concurrently, discarding staged copy")


def _extract_tarball(archive_path: Path, dest_dir: Path) -> None:
    """Extract a .tar.gz, rejecting members that escape ``dest_dir``."""
    root = dest_dir.resolve()
    with tarfile.open(archive_path, "r:gz") as tar:
        for member in tar.getmembers():
            member_path = (dest_dir / member.name).resolve()
            if not member_path.is_relative_to(root):
                raise tarfile.TarError(f"Path traversal detected: {member.name}")
            if member.issym() or member.islnk():
                continue
            tar.extract(member, path=dest_dir)


def _extract_zip(archive_path: Path, dest_dir: Path) -> None:
    """Extract a .zip, rejecting members that escape ``dest_dir``."""
    root = dest_dir.resolve()
    with zipfile.ZipFile(archive_path, "r") as zf:
        for name in zf.namelist():
            member_path = (dest_dir / name).resolve()
            if not member_path.is_relative_to(root):
                raise zipfile.BadZipFile(f"Path traversal detected: {name}")
        zf.extractall(dest_dir)
