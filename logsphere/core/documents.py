"""Strict decoding helpers for Firestore snapshots."""

from __future__ import annotations

from typing import Any

from logsphere.errors import MalformedDocumentError, NotFoundError

_MISSING = object()


class DocumentDecoder:
    """Reads fields from one snapshot, failing closed on bad shapes."""

    def __init__(self, collection: str, snapshot: Any) -> None:
        """Initialize the decoder from a snapshot that must exist."""
        if snapshot is None or not snapshot.exists:
            raise NotFoundError(f"{collection[:-1].capitalize()} not found.")
        self.collection = collection
        self.doc_id = snapshot.id
        self.data: dict[str, Any] = snapshot.to_dict() or {}

    def fail(self, reason: str) -> MalformedDocumentError:
        """Build the error raised for this document."""
        return MalformedDocumentError(self.collection, self.doc_id, reason)

    def required(self, field: str, kind: type | tuple[type, ...]) -> Any:
        """Return a field that must be present with the given type."""
        value = self.data.get(field, _MISSING)
        if value is _MISSING or value is None:
            raise self.fail(f"missing '{field}'")
        if not isinstance(value, kind) or (
            isinstance(value, bool) and bool not in _as_tuple(kind)
        ):
            raise self.fail(f"'{field}' has type {type(value).__name__}")
        return value

    def optional(
        self, field: str, kind: type | tuple[type, ...], default: Any = None
    ) -> Any:
        """Return a field that may be absent, checking its type if present."""
        value = self.data.get(field)
        if value is None:
            return default
        if not isinstance(value, kind):
            raise self.fail(f"'{field}' has type {type(value).__name__}")
        return value

    def choice(self, field: str, allowed: tuple[str, ...]) -> str:
        """Return a string field restricted to ``allowed`` values."""
        value = self.required(field, str)
        if value not in allowed:
            raise self.fail(f"'{field}' has unknown value {value!r}")
        return value

    def string_list(self, field: str) -> list[str]:
        """Return a list of strings, defaulting to an empty list."""
        value = self.optional(field, list, [])
        if not all(isinstance(item, str) for item in value):
            raise self.fail(f"'{field}' must contain only strings")
        return list(value)


def _as_tuple(kind: type | tuple[type, ...]) -> tuple[type, ...]:
    return kind if isinstance(kind, tuple) else (kind,)
