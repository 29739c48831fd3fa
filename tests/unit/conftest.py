"""Shared fixtures for unit tests."""

from __future__ import annotations

import io
import json
import tarfile
import zipfile
from email.message import Message
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.error import HTTPError, URLError

import pytest

from leaktask.core.http import HttpResponse


def http_error(url: str, code: int, reason: str = "error") -> HTTPError:
    return HTTPError(url, code, reason, Message(), None)


def json_response(url: str, data: Any, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
    return HttpResponse(url=url, status=200, body=json.dumps(data).encode("utf-8"), headers=headers or {})


RouteValue = Union[bytes, HttpResponse, Exception, Callable[[str], HttpResponse]]


class FakeHttpClient:
    """Records requests and answers from a URL → value table.

    Unknown URLs answer 404.
    """

    def __init__(self, routes: Optional[Dict[str, RouteValue]] = None) -> None:
        self.routes: Dict[str, RouteValue] = dict(routes or {})
        self.requests: List[Tuple[str, Dict[str, str]]] = []

    @property
    def urls(self) -> List[str]:
        return [url for url, _ in self.requests]

    async def get(
        self, url: str, headers: Optional[Dict[str, str]] = None, *, allow_http: bool = False
    ) -> HttpResponse:
        schemes = ("https://", "http://") if allow_http else ("https://",)
        if not url.lower().startswith(schemes):
            raise ValueError(f"Unsupported URL scheme: {url}")
        self.requests.append((url, dict(headers or {})))
        value = self.routes.get(url)
        if value is None:
            raise http_error(url, 404, "Not Found")
        if isinstance(value, Exception):
            raise value
        if isinstance(value, HttpResponse):
            return value
        if callable(value):
            return value(url)
        return HttpResponse(url=url, status=200, body=value)


def make_tar_gz(files: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def make_zip(files: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def fake_http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def make_http_error() -> Callable[..., HTTPError]:
    return http_error


@pytest.fixture
def make_json_response() -> Callable[..., HttpResponse]:
    return json_response


@pytest.fixture
def url_error() -> URLError:
    return URLError("Name or service not known")


@pytest.fixture
def archives():
    """Archive builders: ``archives.tar_gz({...})`` and ``archives.zip({...})``."""

    class _Archives:
        tar_gz = staticmethod(make_tar_gz)
        zip = staticmethod(make_zip)

    return _Archives
