"""HTTPS access with certifi-backed certificate verification.

Requests are plain blocking ``urlopen`` calls executed in the default
executor, so callers simply ``await`` them. ``HTTPError`` and ``URLError``
propagate unchanged; each component maps them onto its own error types.
"""

from __future__ import annotations

import asyncio
import json
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.request import Request, urlopen

import certifi

from leaktask import __version__
from leaktask.core.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_TIMEOUT = 60.0
USER_AGENT = f"leaktask/{__version__}"


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle.

    Hosted agents and standalone interpreters do not always expose the
    system certificate store to Python.
    """
    return ssl.create_default_context(cafile=certifi.where())


@dataclass(frozen=True)
class HttpResponse:
    """A fully read HTTP response."""

    url: str
    status: int
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


class HttpClient:
    """Minimal async GET client used for release and build API access."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout
        self._ssl_context = get_ssl_context()

    async def get(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        *,
        allow_http: bool = False,
    ) -> HttpResponse:
        """Fetch ``url`` and return the whole response.

        Args:
            url: Absolute URL to fetch.
            headers: Extra request headers.
            allow_http: Also accept plain ``http://`` URLs (on-premises servers).

        Raises:
            ValueError: If the URL scheme is not allowed.
            urllib.error.HTTPError: On a non-2xx status.
            urllib.error.URLError: If the host cannot be reached.
        """
        schemes = ("https://", "http://") if allow_http else ("https://",)
        if not url.lower().startswith(schemes):
            allowed = " or ".join(s.rstrip(":/").upper() for s in schemes)
            raise ValueError(f"Only {allowed} URLs are supported: {url}")

        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._get_blocking, url, dict(headers or {}))

    def _get_blocking(self, url: str, headers: Dict[str, str]) -> HttpResponse:
        request = Request(url, headers={"User-Agent": USER_AGENT, **headers})
        LOGGER.debug(f"GET {url}")
        with urlopen(request, timeout=self._timeout, context=self._ssl_context) as response:  # nosec B310
            body = response.read()
            return HttpResponse(
                url=url,
                status=response.status,
                body=body,
                headers=dict(response.headers.items()),
            )
