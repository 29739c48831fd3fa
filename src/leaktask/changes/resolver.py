"""Resolve the commits of a build into a scope file for the scanner."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Optional

from leaktask.changes.azure_devops import BuildChangesClient
from leaktask.changes.models import BuildContext, ChangeSet
from leaktask.core.errors import ChangeScopeError
from leaktask.core.http import HttpClient
from leaktask.core.logging import get_logger

LOGGER = get_logger(__name__)

SCOPE_FILE_PREFIX = "gitleaks-commits"


class ChangeSetResolver:
    """Enumerates every change of a build and writes the commits file.

    All pages are fetched before anything is written, so a failure on any
    page leaves no scope file behind. A ``depth`` limit is never applied
    here; it is passed to the scanner.
    """

    def __init__(self, client: Optional[BuildChangesClient] = None, http: Optional[HttpClient] = None) -> None:
        self._client = client or BuildChangesClient(http or HttpClient())

    async def collect(self, context: BuildContext) -> ChangeSet:
        """Fetch all pages of build changes into a deduplicated ChangeSet."""
        missing = context.missing_fields()
        if missing:
            raise ChangeScopeError(f"Build context incomplete, missing: {', '.join(missing)}")

        change_set = ChangeSet()
        async for page in self._client.iter_pages(context):
            change_set.extend(page.changes)
        LOGGER.info(f"Build {context.build_id} has {len(change_set)} changes")
        return change_set

    async def resolve_changes(self, context: BuildContext) -> Path:
        """Write the build's commit ids to a scope file and return its path."""
        change_set = await self.collect(context)
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, write_scope_file, change_set, context)


def scope_file_path(context: BuildContext) -> Path:
    return Path(context.temp_dir) / f"{SCOPE_FILE_PREFIX}-{context.build_id}.txt"


def write_scope_file(change_set: ChangeSet, context: BuildContext) -> Path:
    """Write one commit id per line, replacing any previous file atomically."""
    target = scope_file_path(context)
    target.parent.mkdir(parents=True, exist_ok=True)
    partial = target.with_name(f"{target.name}.{os.getpid()}.partial")
    content = "".join(f"{commit_id}\n" for commit_id in change_set.commit_ids())
    partial.write_text(content, encoding="utf-8", newline="\n")
    os.replace(partial, target)
    LOGGER.debug(f"Wrote {len(change_set.commit_ids())} commit ids to {target}")
    return target
