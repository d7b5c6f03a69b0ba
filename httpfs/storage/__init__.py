"""Storage adapters exposing a uniform filesystem interface."""

from httpfs.storage.base import (
    DirectoryAttributes,
    FileAttributes,
    FilesystemAdapter,
    StorageAttributes,
    Visibility,
)
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
from httpfs.storage.http_adapter import HttpAdapter
from httpfs.storage.schema import SchemaError

__all__ = [
    "FilesystemAdapter",
    "HttpAdapter",
    "FileAttributes",
    "DirectoryAttributes",
    "StorageAttributes",
    "Visibility",
    "FilesystemError",
    "ExistenceCheckFailed",
    "WriteFailed",
    "ReadFailed",
    "DeleteFailed",
    "DirectoryDeleteFailed",
    "DirectoryCreateFailed",
    "MetadataRetrievalFailed",
    "VisibilitySetFailed",
    "CopyFailed",
    "MoveFailed",
    "UnsupportedOperation",
    "SchemaError",
]
