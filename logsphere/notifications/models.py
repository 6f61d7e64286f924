"""Data models for notifications."""

from __future__ import annotations

from typing import Any

from logsphere.core.constants import NOTIFICATIONS_COLLECTION
from logsphere.core.documents import DocumentDecoder
from logsphere.core.types import FirestoreDocument
from logsphere.dates import to_iso_string


class Notification(FirestoreDocument, total=False):
    """A per-user notification document in Firestore."""

    userId: str
    title: str
    message: str
    logId: str | None
    read: bool


def notification_from_snapshot(snapshot: Any) -> Notification:
    """Decode a notification snapshot."""
    doc = DocumentDecoder(NOTIFICATIONS_COLLECTION, snapshot)
    return {
        "id": doc.doc_id,
        "userId": doc.required("userId", str),
        "title": doc.optional("title", str, ""),
        "message": doc.required("message", str),
        "logId": doc.optional("logId", str),
        "read": doc.optional("read", bool, False),
        "createdAt": doc.data.get("createdAt"),
    }


def notification_to_json(notification: Notification) -> dict[str, Any]:
    """Render a notification as JSON-safe data."""
    return {**notification, "createdAt": to_iso_string(notification.get("createdAt"))}
