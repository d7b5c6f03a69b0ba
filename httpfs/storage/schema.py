"""Wire schema for the JSON bodies returned by the storage service.

Field access on response payloads goes through these parsers so that a
change in the service's response shape fails with :class:`SchemaError`
instead of an ``AttributeError``/``KeyError`` deep inside the adapter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Mapping

SCHEMA_VERSION = 1


class SchemaError(ValueError):
    """Response payload does not match the expected wire schema."""


def _check_version(payload: object) -> Mapping[str, object]:
    if not isinstance(payload, Mapping):
        raise SchemaError(f"Expected a JSON object, got {type(payload).__name__}")
    version = payload.get("schema_version")
    if version is not None and version != SCHEMA_VERSION:
        raise SchemaError(
            f"Unsupported schema_version {version!r} (supported: {SCHEMA_VERSION})"
        )
    return payload


@dataclass(frozen=True)
class ExistsResponse:
    exists: bool

    @classmethod
    def from_payload(cls, payload: object) -> "ExistsResponse":
        body = _check_version(payload)
        exists = body.get("exists")
        if not isinstance(exists, bool):
            raise SchemaError(f"'exists' must be a boolean, got: {exists!r}")
        return cls(exists=exists)


@dataclass(frozen=True)
class FileMeta:
    """Raw ``meta`` object from the metadata endpoint.

    Attributes are validated one at a time by :meth:`get`, so a malformed
    attribute only fails the lookups that ask for it.
    """

    fields: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: object) -> "FileMeta":
        body = _check_version(payload)
        meta = body.get("meta")
        if not isinstance(meta, Mapping):
            raise SchemaError(f"'meta' must be an object, got: {meta!r}")
        return cls(fields=dict(meta))

    def get(self, name: str) -> object:
        """Return one parsed attribute, ``None`` when the service omitted it."""
        try:
            parser = _FIELD_PARSERS[name]
        except KeyError as exc:
            raise SchemaError(f"Unknown metadata attribute {name!r}") from exc
        return parser(name, self.fields.get(name))


def _parse_size(name: str, value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(f"'meta.{name}' must be an integer, got: {value!r}")
    return value


def _parse_str(name: str, value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise SchemaError(f"'meta.{name}' must be a string, got: {value!r}")
    return value


def _parse_timestamp(name: str, value: object) -> int | None:
    """Normalise a unix timestamp or ISO-8601 string to an int timestamp."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise SchemaError(f"'meta.{name}' must be a timestamp, got: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise SchemaError(f"'meta.{name}' must be a finite timestamp, got: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        if value.strip().isdigit():
            return int(value)
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise SchemaError(f"'meta.{name}' is not a timestamp: {value!r}") from exc
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        try:
            return int(parsed.timestamp())
        except (OverflowError, OSError) as exc:
            raise SchemaError(f"'meta.{name}' is out of range: {value!r}") from exc
    raise SchemaError(f"'meta.{name}' must be a timestamp, got: {value!r}")


_FIELD_PARSERS: Dict[str, Callable[[str, object], object]] = {
    "size": _parse_size,
    "visibility": _parse_str,
    "mime_type": _parse_str,
    "last_modified": _parse_timestamp,
}
