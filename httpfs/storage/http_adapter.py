"""Filesystem adapter backed by a remote HTTP storage API."""

from __future__ import annotations

import dataclasses
import logging
import threading
from dataclasses import dataclass
from typing import BinaryIO, Callable, Dict, Iterator, Mapping

import requests
from requests.auth import HTTPBasicAuth
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from httpfs.config import StorageSettings
from httpfs.storage.base import FileAttributes, FilesystemAdapter, StorageAttributes, Visibility
from httpfs.storage.errors import (
    CopyFailed,
    DeleteFailed,
    DirectoryCreateFailed,
    DirectoryDeleteFailed,
    ExistenceCheckFailed,
    FilesystemError,
    MetadataRetrievalFailed,
    MoveFailed,
    ReadFailed,
    UnsupportedOperation,
    VisibilitySetFailed,
    WriteFailed,
)
from httpfs.storage.schema import ExistsResponse, FileMeta, SchemaError

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "public"
API_PREFIX = "api/"

SessionFactory = Callable[[StorageSettings], requests.Session]


def _default_session_factory(settings: StorageSettings) -> requests.Session:
    session = requests.Session()
    session.verify = settings.verify_ssl
    return session


@dataclass(frozen=True)
class MetadataFetch:
    """Outcome of a metadata request: either ``meta`` or ``error`` is set."""

    meta: FileMeta | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class HttpAdapter(FilesystemAdapter):
    """Maps filesystem operations one-to-one onto the storage service's HTTP API.

    Every request carries HTTP basic credentials and the current bucket as a
    top-level field. The bucket is read once per operation, so a concurrent
    ``set_bucket`` never splits one call across two buckets; use
    :meth:`with_bucket` for a handle pinned to another bucket.

    Usage:
        adapter = HttpAdapter.from_mapping(
            {"url": "https://files.example", "username": "app", "password": "secret"}
        )
        adapter.write("reports/a.txt", "hello")
        adapter.read("reports/a.txt")  # b"hello"
    """

    def __init__(
        self,
        settings: StorageSettings,
        *,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self._settings = settings
        self._base_url = settings.service_url.rstrip("/") + "/" + API_PREFIX

        factory = session_factory or _default_session_factory
        self._session = factory(settings)
        self._session.auth = HTTPBasicAuth(settings.username, settings.password)
        self._owns_session = True

        self._bucket_lock = threading.Lock()
        self._bucket = DEFAULT_BUCKET
        if settings.bucket:
            self.set_bucket(settings.bucket)

        logger.info("Initialized HTTP storage adapter: base_url=%s, bucket=%s", self._base_url, self._bucket)

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, object], *, session_factory: SessionFactory | None = None
    ) -> "HttpAdapter":
        return cls(StorageSettings.from_mapping(mapping), session_factory=session_factory)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def bucket(self) -> str:
        with self._bucket_lock:
            return self._bucket

    def set_bucket(self, bucket: str) -> None:
        if not bucket:
            raise ValueError("Bucket name must not be empty")
        with self._bucket_lock:
            self._bucket = bucket

    def with_bucket(self, bucket: str) -> "HttpAdapter":
        """Return an adapter bound to ``bucket`` that shares this adapter's session."""
        if not bucket:
            raise ValueError("Bucket name must not be empty")
        scoped = HttpAdapter(
            dataclasses.replace(self._settings, bucket=bucket),
            session_factory=lambda _: self._session,
        )
        scoped._owns_session = False
        return scoped

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "HttpAdapter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Existence checks

    def file_exists(self, path: str) -> bool:
        return self._check_exists("file/exists", self.bucket, path, scope="file")

    def directory_exists(self, path: str) -> bool:
        return self._check_exists("directory/exists", self.bucket, path, scope="directory")

    # File contents

    def write(self, path: str, contents: str | bytes) -> None:
        self._write(self.bucket, path, contents)

    def write_stream(self, path: str, stream: BinaryIO) -> None:
        raise UnsupportedOperation(path, "write stream")

    def read(self, path: str) -> bytes:
        return self._read(self.bucket, path)

    def read_stream(self, path: str) -> BinaryIO:
        raise UnsupportedOperation(path, "read stream")

    def delete(self, path: str) -> None:
        self._delete(self.bucket, path)

    # Directories

    def delete_directory(self, path: str) -> None:
        try:
            response = self._request("DELETE", "directory", {"bucket": self.bucket, "path": path})
        except requests.RequestException as exc:
            logger.warning("Deleting directory %s failed: %s", path, exc)
            raise DirectoryDeleteFailed(path, str(exc)) from exc

        if response.status_code != 200:
            raise DirectoryDeleteFailed(path, "Directory could not be deleted")

    def create_directory(self, path: str) -> None:
        try:
            response = self._request("POST", "directory", {"bucket": self.bucket, "path": path})
        except requests.RequestException as exc:
            logger.warning("Creating directory %s failed: %s", path, exc)
            raise DirectoryCreateFailed(path, str(exc)) from exc

        if response.status_code != 200:
            raise DirectoryCreateFailed(path, response.text)

    def list_contents(self, path: str, deep: bool = False) -> Iterator[StorageAttributes]:
        raise UnsupportedOperation(path, "list contents")

    # Visibility and metadata

    def set_visibility(self, path: str, visibility: str) -> None:
        Visibility.validate(visibility)
        raise VisibilitySetFailed(path, "The storage service does not support changing visibility.")

    def visibility(self, path: str) -> FileAttributes:
        value = self._meta_attribute(path, MetadataRetrievalFailed.VISIBILITY, "visibility")
        return FileAttributes(path, visibility=value)

    def mime_type(self, path: str) -> FileAttributes:
        value = self._meta_attribute(path, MetadataRetrievalFailed.MIME_TYPE, "mime_type")
        return FileAttributes(path, mime_type=value)

    def last_modified(self, path: str) -> FileAttributes:
        value = self._meta_attribute(path, MetadataRetrievalFailed.LAST_MODIFIED, "last_modified")
        return FileAttributes(path, last_modified=value)

    def file_size(self, path: str) -> FileAttributes:
        value = self._meta_attribute(path, MetadataRetrievalFailed.FILE_SIZE, "size")
        return FileAttributes(path, file_size=value)

    # Copy / move, built from read + write (+ delete)

    def copy(self, source: str, destination: str) -> None:
        self._copy(self.bucket, source, destination)

    def move(self, source: str, destination: str) -> None:
        if source == destination:
            return
        bucket = self.bucket
        try:
            self._copy(bucket, source, destination)
            self._delete(bucket, source)
        except FilesystemError as exc:
            raise MoveFailed(source, destination, str(exc)) from exc

    # Internals

    def _copy(self, bucket: str, source: str, destination: str) -> None:
        try:
            contents = self._read(bucket, source)
            self._write(bucket, destination, contents)
        except FilesystemError as exc:
            raise CopyFailed(source, destination, str(exc)) from exc

    def _check_exists(self, endpoint: str, bucket: str, path: str, *, scope: str) -> bool:
        try:
            response = self._request("POST", endpoint, {"bucket": bucket, "path": path})
            response.raise_for_status()
            return ExistsResponse.from_payload(response.json()).exists
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Checking %s existence of %s failed: %s", scope, path, exc)
            raise ExistenceCheckFailed(path, str(exc), scope=scope) from exc

    def _write(self, bucket: str, path: str, contents: str | bytes) -> None:
        try:
            text = contents.decode("utf-8") if isinstance(contents, bytes) else contents
        except UnicodeDecodeError as exc:
            raise WriteFailed(path, "Contents must be UTF-8 text") from exc

        try:
            response = self._request(
                "POST", "file", {"bucket": bucket, "path": path, "contents": text}
            )
        except requests.RequestException as exc:
            logger.warning("Writing %s failed: %s", path, exc)
            raise WriteFailed(path, str(exc)) from exc

        if response.status_code != 200:
            raise WriteFailed(path, response.text)

    def _read(self, bucket: str, path: str) -> bytes:
        try:
            response = self._request("GET", "file", {"bucket": bucket, "path": path}, query=True)
        except requests.RequestException as exc:
            logger.warning("Reading %s failed: %s", path, exc)
            raise ReadFailed(path, str(exc)) from exc

        if response.status_code != 200:
            raise ReadFailed(path, "File not found")
        return response.content

    def _delete(self, bucket: str, path: str) -> None:
        try:
            response = self._request("DELETE", "file", {"bucket": bucket, "path": path})
        except requests.RequestException as exc:
            logger.warning("Deleting %s failed: %s", path, exc)
            raise DeleteFailed(path, str(exc)) from exc

        if response.status_code != 200:
            raise DeleteFailed(path, "File could not be deleted")

    def _fetch_meta(self, bucket: str, path: str) -> MetadataFetch:
        try:
            response = self._request("POST", "file/meta", {"bucket": bucket, "path": path})
            response.raise_for_status()
            return MetadataFetch(meta=FileMeta.from_payload(response.json()))
        except (requests.RequestException, ValueError) as exc:
            return MetadataFetch(error=exc)

    def _meta_attribute(self, path: str, metadata_type: str, attribute: str) -> object:
        result = self._fetch_meta(self.bucket, path)
        if not result.ok:
            logger.warning("Fetching metadata for %s failed: %s", path, result.error)
            raise MetadataRetrievalFailed(path, metadata_type, str(result.error)) from result.error

        try:
            value = result.meta.get(attribute)
        except SchemaError as exc:
            logger.warning("Metadata for %s has a malformed %s: %s", path, attribute, exc)
            raise MetadataRetrievalFailed(path, metadata_type, str(exc)) from exc
        if value is None:
            raise MetadataRetrievalFailed(
                path, metadata_type, f"'{attribute}' is missing from the metadata response"
            )
        return value

    def _request(
        self, method: str, endpoint: str, payload: Dict[str, object], *, query: bool = False
    ) -> requests.Response:
        url = self._base_url + endpoint
        logger.debug("%s %s bucket=%s path=%s", method, endpoint, payload["bucket"], payload["path"])
        options: Dict[str, object] = {"params": payload} if query else {"json": payload}
        return self._retrying(method)(
            self._session.request,
            method,
            url,
            timeout=self._settings.timeout_seconds,
            **options,
        )

    def _retrying(self, method: str) -> Retrying:
        # A read timeout on a mutating call may already have taken effect server-side
        retryable = (
            (requests.ConnectionError, requests.Timeout)
            if method == "GET"
            else (requests.ConnectionError,)
        )
        return Retrying(
            retry=retry_if_exception_type(retryable),
            stop=stop_after_attempt(self._settings.retries),
            wait=wait_exponential(multiplier=self._settings.retry_backoff_seconds, max=10),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
