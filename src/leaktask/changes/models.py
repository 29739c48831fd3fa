"""Data models for build change enumeration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple


class ChangeKind(str, Enum):
    """Kind of change reported for a path."""

    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    RENAME = "rename"

    @classmethod
    def from_api(cls, value: Optional[str]) -> "ChangeKind":
        """Map an API change type onto a ChangeKind (unknown values count as edits)."""
        if not value:
            return cls.EDIT
        normalized = value.strip().lower()
        for kind in cls:
            if normalized == kind.value:
                return kind
        return _API_ALIASES.get(normalized, cls.EDIT)


_API_ALIASES: Dict[str, ChangeKind] = {
    "added": ChangeKind.ADD,
    "modified": ChangeKind.EDIT,
    "removed": ChangeKind.DELETE,
    "deleted": ChangeKind.DELETE,
    "renamed": ChangeKind.RENAME,
}


@dataclass(frozen=True)
class BuildChange:
    """One changed item reported by the build API."""

    file_path: str
    change_kind: ChangeKind
    commit_id: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.file_path, self.commit_id)


class ChangeSet:
    """Build changes deduplicated by (file path, commit id).

    Iteration follows first-seen order so identical input always produces
    identical output.
    """

    def __init__(self, changes: Iterable[BuildChange] = ()) -> None:
        self._changes: Dict[Tuple[str, str], BuildChange] = {}
        self.extend(changes)

    def add(self, change: BuildChange) -> bool:
        """Add a change; returns False if its key was already present."""
        if change.key in self._changes:
            return False
        self._changes[change.key] = change
        return True

    def extend(self, changes: Iterable[BuildChange]) -> None:
        for change in changes:
            self.add(change)

    def commit_ids(self) -> List[str]:
        """Distinct commit ids in first-seen order."""
        seen: Dict[str, None] = {}
        for change in self._changes.values():
            if change.commit_id:
                seen.setdefault(change.commit_id, None)
        return list(seen)

    def __iter__(self) -> Iterator[BuildChange]:
        return iter(self._changes.values())

    def __len__(self) -> int:
        return len(self._changes)

    def __contains__(self, change: object) -> bool:
        return isinstance(change, BuildChange) and change.key in self._changes


# Agent variables identifying the running build
COLLECTION_URI_ENV = "SYSTEM_TEAMFOUNDATIONCOLLECTIONURI"
PROJECT_ENV = "SYSTEM_TEAMPROJECT"
PROJECT_ID_ENV = "SYSTEM_TEAMPROJECTID"
BUILD_ID_ENV = "BUILD_BUILDID"
ACCESS_TOKEN_ENV = "SYSTEM_ACCESSTOKEN"
TEMP_DIRECTORY_ENV = "AGENT_TEMPDIRECTORY"


@dataclass(frozen=True)
class BuildContext:
    """Identifies the build whose changes are enumerated."""

    collection_uri: str
    project: str
    build_id: str
    access_token: str = field(default="", repr=False)
    temp_dir: Path = field(default_factory=lambda: Path(os.getcwd()))

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "BuildContext":
        """Read the build context from pipeline agent variables."""
        env = os.environ if environ is None else environ
        temp_dir = env.get(TEMP_DIRECTORY_ENV)
        return cls(
            collection_uri=env.get(COLLECTION_URI_ENV, ""),
            project=env.get(PROJECT_ID_ENV) or env.get(PROJECT_ENV, ""),
            build_id=env.get(BUILD_ID_ENV, ""),
            access_token=env.get(ACCESS_TOKEN_ENV, ""),
            temp_dir=Path(temp_dir) if temp_dir else Path(os.getcwd()),
        )

    def missing_fields(self) -> List[str]:
        """Names of the identifying fields that are empty."""
        return [
            name
            for name in ("collection_uri", "project", "build_id")
            if not getattr(self, name)
        ]
