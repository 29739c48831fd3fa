"""Build changes client for the Azure DevOps REST API.

``GET {collection}/{project}/_apis/build/builds/{id}/changes`` returns one
page of changes; when more are available the response carries an
``x-ms-continuationtoken`` header that is sent back as
``continuationToken`` to fetch the next page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode

from leaktask.changes.models import BuildChange, BuildContext, ChangeKind
from leaktask.core.errors import APIAuthError, APIUnavailable
from leaktask.core.http import HttpClient, HttpResponse
from leaktask.core.logging import get_logger

LOGGER = get_logger(__name__)

API_VERSION = "7.1"
DEFAULT_PAGE_SIZE = 100
CONTINUATION_HEADER = "x-ms-continuationtoken"

# 203 is what the service answers with a sign-in page for a rejected token
_AUTH_STATUSES = frozenset({203, 401, 403})


@dataclass(frozen=True)
class ChangesPage:
    """One page of build changes."""

    changes: List[BuildChange]
    continuation_token: Optional[str] = None


def parse_change(item: Dict[str, Any]) -> Optional[BuildChange]:
    """Convert one API item to a BuildChange (None if it has no commit id)."""
    commit_id = str(item.get("id") or item.get("commitId") or "").strip()
    if not commit_id:
        return None
    return BuildChange(
        file_path=str(item.get("filePath") or item.get("path") or ""),
        change_kind=ChangeKind.from_api(item.get("changeType")),
        commit_id=commit_id,
    )


class BuildChangesClient:
    """Pages through the changes of one build."""

    def __init__(self, http: HttpClient, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._http = http
        self._page_size = page_size

    def changes_url(self, context: BuildContext, continuation_token: Optional[str] = None) -> str:
        base = context.collection_uri.rstrip("/")
        project = quote(context.project, safe="")
        build_id = quote(str(context.build_id), safe="")
        query: Dict[str, str] = {"api-version": API_VERSION, "$top": str(self._page_size)}
        if continuation_token:
            query["continuationToken"] = continuation_token
        return f"{base}/{project}/_apis/build/builds/{build_id}/changes?{urlencode(query)}"

    async def iter_pages(self, context: BuildContext) -> AsyncIterator[ChangesPage]:
        """Yield pages until the service stops returning a continuation token.

        Each call starts again from the first page.

        Raises:
            APIAuthError: If the token is missing or lacks permission.
            APIUnavailable: On connection failures and any other error status.
        """
        token: Optional[str] = None
        page_number = 0
        while True:
            page_number += 1
            url = self.changes_url(context, token)
            response = await self._fetch(url, context)
            page = self._parse_page(response)
            LOGGER.debug(
                f"Fetched page {page_number} of build {context.build_id} changes "
                f"({len(page.changes)} items)"
            )
            yield page
            if not page.continuation_token:
                return
            token = page.continuation_token

    async def _fetch(self, url: str, context: BuildContext) -> HttpResponse:
        headers = {"Accept": "application/json"}
        if context.access_token:
            headers["Authorization"] = f"Bearer {context.access_token}"
        try:
            response = await self._http.get(url, headers=headers, allow_http=True)
        except ValueError as e:
            raise APIUnavailable(f"Invalid collection URI {context.collection_uri!r}: {e}", url=url) from e
        except HTTPError as e:
            if e.code in _AUTH_STATUSES:
                raise APIAuthError(
                    f"Not authorized to read changes of build {context.build_id} "
                    f"(HTTP {e.code}); allow scripts to access the OAuth token",
                    url=url,
                    status=e.code,
                ) from e
            raise APIUnavailable(
                f"Build API returned HTTP {e.code} for build {context.build_id}: {e.reason}",
                url=url,
                status=e.code,
            ) from e
        except URLError as e:
            raise APIUnavailable(f"Build API unreachable: {e.reason}", url=url) from e

        if response.status in _AUTH_STATUSES:
            raise APIAuthError(
                f"Not authorized to read changes of build {context.build_id} (HTTP {response.status})",
                url=url,
                status=response.status,
            )
        return response

    def _parse_page(self, response: HttpResponse) -> ChangesPage:
        try:
            data = response.json()
        except ValueError as e:
            raise APIUnavailable(
                f"Build API returned an unreadable page: {e}", url=response.url, status=response.status
            ) from e
        if not isinstance(data, dict):
            raise APIUnavailable("Build API returned an unexpected payload", url=response.url)

        changes = []
        for item in data.get("value") or []:
            change = parse_change(item)
            if change is not None:
                changes.append(change)

        token = response.header(CONTINUATION_HEADER) or data.get("continuationToken")
        return ChangesPage(changes=changes, continuation_token=token or None)
