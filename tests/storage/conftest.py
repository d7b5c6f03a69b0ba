"""In-process stand-in for the remote storage service."""

from __future__ import annotations

import dataclasses
import json
import mimetypes
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple
from urllib.parse import parse_qs, urlparse

import pytest
import requests
from requests.adapters import BaseAdapter

from httpfs.config import StorageSettings
from httpfs.storage import HttpAdapter

LAST_MODIFIED = 1_700_000_000


@dataclass
class RecordedRequest:
    method: str
    endpoint: str
    fields: Dict[str, str]
    authorization: str | None
    timeout: object


class FakeStorageService(BaseAdapter):
    """Transport adapter that answers the storage API from an in-memory store.

    ``overrides`` maps ``(method, endpoint)`` to a canned ``(status, body)``
    and ``failures`` holds exceptions raised by the next requests, in order.
    ``on_request`` is called with each recorded request before it is answered.
    """

    def __init__(self) -> None:
        super().__init__()
        self.files: Dict[Tuple[str, str], str] = {}
        self.directories: set[Tuple[str, str]] = set()
        self.overrides: Dict[Tuple[str, str], Tuple[int, object]] = {}
        self.failures: List[Exception] = []
        self.requests: List[RecordedRequest] = []
        self.on_request: Callable[[RecordedRequest], None] | None = None

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        parsed = urlparse(request.url)
        assert parsed.path.startswith("/api/")
        endpoint = parsed.path[len("/api/"):]
        if request.method == "GET":
            fields = {key: values[0] for key, values in parse_qs(parsed.query).items()}
        else:
            fields = json.loads(request.body) if request.body else {}
        self.requests.append(
            RecordedRequest(
                method=request.method,
                endpoint=endpoint,
                fields=fields,
                authorization=request.headers.get("Authorization"),
                timeout=timeout,
            )
        )
        if self.on_request is not None:
            self.on_request(self.requests[-1])

        if self.failures:
            raise self.failures.pop(0)

        key = (request.method, endpoint)
        if key in self.overrides:
            status, body = self.overrides[key]
        else:
            status, body = self._handle(request.method, endpoint, fields)
        return _build_response(request, status, body)

    def close(self) -> None:
        pass

    def _handle(self, method: str, endpoint: str, fields: Dict[str, str]) -> Tuple[int, object]:
        location = (fields["bucket"], fields["path"])

        if (method, endpoint) == ("POST", "file/exists"):
            return 200, {"exists": location in self.files}
        if (method, endpoint) == ("POST", "directory/exists"):
            return 200, {"exists": location in self.directories}
        if (method, endpoint) == ("POST", "file"):
            self.files[location] = fields["contents"]
            return 200, {"path": fields["path"]}
        if (method, endpoint) == ("GET", "file"):
            if location not in self.files:
                return 404, "Not Found"
            return 200, self.files[location]
        if (method, endpoint) == ("DELETE", "file"):
            if self.files.pop(location, None) is None:
                return 404, "Not Found"
            return 200, ""
        if (method, endpoint) == ("POST", "directory"):
            self.directories.add(location)
            return 200, ""
        if (method, endpoint) == ("DELETE", "directory"):
            if location not in self.directories:
                return 404, "Not Found"
            self.directories.discard(location)
            prefix = location[1].rstrip("/") + "/"
            for bucket, path in list(self.files):
                if bucket == location[0] and path.startswith(prefix):
                    del self.files[(bucket, path)]
            return 200, ""
        if (method, endpoint) == ("POST", "file/meta"):
            if location not in self.files:
                return 404, {"message": "Not Found"}
            mime_type, _ = mimetypes.guess_type(location[1])
            return 200, {
                "meta": {
                    "size": len(self.files[location].encode("utf-8")),
                    "visibility": "public",
                    "mime_type": mime_type or "application/octet-stream",
                    "last_modified": LAST_MODIFIED,
                }
            }
        return 404, "Unknown endpoint"


def _build_response(request, status: int, body: object) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.request = request
    response.url = request.url
    response.encoding = "utf-8"
    if isinstance(body, (dict, list)):
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = str(body).encode("utf-8")
        response.headers["Content-Type"] = "text/plain"
    return response


@pytest.fixture
def service() -> FakeStorageService:
    return FakeStorageService()


@pytest.fixture
def settings() -> StorageSettings:
    return StorageSettings(
        service_url="https://storage.example",
        username="app",
        password="secret",
        retry_backoff_seconds=0.0,
    )


@pytest.fixture
def make_adapter(service, settings):
    def _make(**overrides) -> HttpAdapter:
        def session_factory(_: StorageSettings) -> requests.Session:
            session = requests.Session()
            session.mount("https://", service)
            return session

        return HttpAdapter(dataclasses.replace(settings, **overrides), session_factory=session_factory)

    return _make


@pytest.fixture
def adapter(make_adapter) -> HttpAdapter:
    return make_adapter()
