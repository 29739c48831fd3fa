"""Change-scope resolution: which commits a build introduced."""

from leaktask.changes.azure_devops import BuildChangesClient, ChangesPage
from leaktask.changes.models import BuildChange, BuildContext, ChangeKind, ChangeSet
from leaktask.changes.resolver import ChangeSetResolver

__all__ = [
    "BuildChange",
    "BuildChangesClient",
    "BuildContext",
    "ChangeKind",
    "ChangeSet",
    "ChangeSetResolver",
    "ChangesPage",
]
