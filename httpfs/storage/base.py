"""Abstract filesystem contract and the attribute types it returns."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Iterator, Union


class Visibility:
    PUBLIC = "public"
    PRIVATE = "private"

    ALL = frozenset({PUBLIC, PRIVATE})

    @classmethod
    def validate(cls, value: str) -> str:
        if value not in cls.ALL:
            raise ValueError(
                f"Invalid visibility {value!r}, expected one of: {', '.join(sorted(cls.ALL))}"
            )
        return value


@dataclass(frozen=True)
class FileAttributes:
    """Descriptor for a stored file; unset attributes stay ``None``."""

    path: str
    file_size: int | None = None
    visibility: str | None = None
    last_modified: int | None = None
    mime_type: str | None = None
    extra_metadata: Dict[str, object] = field(default_factory=dict)

    def is_file(self) -> bool:
        return True

    def is_dir(self) -> bool:
        return False


@dataclass(frozen=True)
class DirectoryAttributes:
    path: str
    visibility: str | None = None
    last_modified: int | None = None
    extra_metadata: Dict[str, object] = field(default_factory=dict)

    def is_file(self) -> bool:
        return False

    def is_dir(self) -> bool:
        return True


StorageAttributes = Union[FileAttributes, DirectoryAttributes]


class FilesystemAdapter(ABC):
    """Capability set every storage backend exposes to application code.

    Implementations raise the kinds from :mod:`httpfs.storage.errors` and never
    leak transport exceptions.
    """

    @abstractmethod
    def file_exists(self, path: str) -> bool:  # pragma: no cover - interface contract
        """Return True if a file exists at ``path``."""

    @abstractmethod
    def directory_exists(self, path: str) -> bool:
        """Return True if a directory exists at ``path``."""

    @abstractmethod
    def write(self, path: str, contents: str | bytes) -> None:
        """Create or overwrite a file."""

    @abstractmethod
    def write_stream(self, path: str, stream: BinaryIO) -> None:
        """Create or overwrite a file from a readable stream."""

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Return the full contents of a file."""

    @abstractmethod
    def read_stream(self, path: str) -> BinaryIO:
        """Return a readable stream over a file's contents."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete a file."""

    @abstractmethod
    def delete_directory(self, path: str) -> None:
        """Delete a directory and everything below it."""

    @abstractmethod
    def create_directory(self, path: str) -> None:
        """Create a directory (idempotent on the service side)."""

    @abstractmethod
    def set_visibility(self, path: str, visibility: str) -> None:
        """Change a file's visibility."""

    @abstractmethod
    def visibility(self, path: str) -> FileAttributes:
        """Return attributes carrying only the visibility."""

    @abstractmethod
    def mime_type(self, path: str) -> FileAttributes:
        """Return attributes carrying only the mime type."""

    @abstractmethod
    def last_modified(self, path: str) -> FileAttributes:
        """Return attributes carrying only the modification timestamp."""

    @abstractmethod
    def file_size(self, path: str) -> FileAttributes:
        """Return attributes carrying only the size in bytes."""

    @abstractmethod
    def list_contents(self, path: str, deep: bool = False) -> Iterator[StorageAttributes]:
        """Yield file and directory entries below ``path``."""

    @abstractmethod
    def move(self, source: str, destination: str) -> None:
        """Move a file."""

    @abstractmethod
    def copy(self, source: str, destination: str) -> None:
        """Copy a file."""
