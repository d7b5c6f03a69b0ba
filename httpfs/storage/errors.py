"""Exception hierarchy raised by filesystem adapters."""

from __future__ import annotations


class FilesystemError(RuntimeError):
    """Base class for every failure surfaced by a filesystem adapter.

    ``location`` is the path the operation targeted and ``reason`` a short
    human-readable detail (often the service's response body). The transport
    or parsing failure that triggered the error is chained as ``__cause__``.
    """

    operation = "access"

    def __init__(self, location: str, reason: str = "") -> None:
        self.location = location
        self.reason = reason
        message = f"Unable to {self.operation} at location: {location}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class ExistenceCheckFailed(FilesystemError):
    operation = "check existence"

    def __init__(self, location: str, reason: str = "", *, scope: str = "file") -> None:
        self.scope = scope
        self.operation = f"check {scope} existence"
        super().__init__(location, reason)


class WriteFailed(FilesystemError):
    operation = "write file"


class ReadFailed(FilesystemError):
    operation = "read file"


class DeleteFailed(FilesystemError):
    operation = "delete file"


class DirectoryDeleteFailed(FilesystemError):
    operation = "delete directory"


class DirectoryCreateFailed(FilesystemError):
    operation = "create directory"


class MetadataRetrievalFailed(FilesystemError):
    """Raised when one attribute of a stored file cannot be retrieved."""

    VISIBILITY = "visibility"
    MIME_TYPE = "mime_type"
    LAST_MODIFIED = "last_modified"
    FILE_SIZE = "file_size"

    def __init__(self, location: str, metadata_type: str, reason: str = "") -> None:
        self.metadata_type = metadata_type
        self.operation = f"retrieve the {metadata_type.replace('_', ' ')}"
        super().__init__(location, reason)


class VisibilitySetFailed(FilesystemError):
    operation = "set visibility"


class _TransferFailed(FilesystemError):
    def __init__(self, source: str, destination: str, reason: str = "") -> None:
        self.source = source
        self.destination = destination
        super().__init__(f"{source} -> {destination}", reason)


class CopyFailed(_TransferFailed):
    operation = "copy file"


class MoveFailed(_TransferFailed):
    operation = "move file"


class UnsupportedOperation(FilesystemError):
    """The remote service exposes no endpoint for the requested operation."""

    def __init__(self, location: str, operation: str) -> None:
        self.operation = operation
        super().__init__(location, "Operation is not supported by this adapter.")
