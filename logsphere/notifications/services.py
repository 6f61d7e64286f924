"""Service layer for per-user notifications."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from logsphere.core.constants import FIRESTORE_BATCH_LIMIT, NOTIFICATIONS_COLLECTION
from logsphere.dates import utcnow
from logsphere.errors import PermissionDeniedError

from .models import Notification, notification_from_snapshot

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

_EPOCH = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


def build_notification(
    user_id: str, title: str, message: str, log_id: str | None = None
) -> dict[str, Any]:
    """Build the stored form of a new, unread notification."""
    return {
        "userId": user_id,
        "title": title,
        "message": message,
        "logId": log_id,
        "read": False,
        "createdAt": utcnow(),
    }


class NotificationService:
    """Service class for notification operations."""

    @staticmethod
    def create_notification(
        db: Client, user_id: str, title: str, message: str, log_id: str | None = None
    ) -> Notification:
        """Store a notification for ``user_id``."""
        ref = db.collection(NOTIFICATIONS_COLLECTION).document()
        data = build_notification(user_id, title, message, log_id)
        ref.set(data)
        return {"id": ref.id, **data}  # type: ignore[typeddict-item]

    @staticmethod
    def _query_for_user(db: Client, user_id: str) -> Any:
        return db.collection(NOTIFICATIONS_COLLECTION).where(
            filter=firestore.FieldFilter("userId", "==", user_id)
        )

    @staticmethod
    def list_notifications(db: Client, user_id: str) -> list[Notification]:
        """Fetch a user's notifications, newest first."""
        notifications = [
            notification_from_snapshot(snap)
            for snap in NotificationService._query_for_user(db, user_id).stream()
        ]
        return sorted(
            notifications,
            key=lambda n: n.get("createdAt") or _EPOCH,
            reverse=True,
        )

    @staticmethod
    def unread_count(db: Client, user_id: str) -> int:
        """Count a user's unread notifications."""
        return sum(
            1 for n in NotificationService.list_notifications(db, user_id) if not n["read"]
        )

    @staticmethod
    def mark_read(db: Client, notification_id: str, user_id: str) -> None:
        """Mark one of the user's notifications as read."""
        ref = db.collection(NOTIFICATIONS_COLLECTION).document(notification_id)
        notification = notification_from_snapshot(ref.get())
        if notification["userId"] != user_id:
            raise PermissionDeniedError("That notification belongs to someone else.")
        ref.update({"read": True})

    @staticmethod
    def mark_all_read(db: Client, user_id: str) -> int:
        """Mark every unread notification of the user as read."""
        unread = [
            snap.reference
            for snap in NotificationService._query_for_user(db, user_id).stream()
            if not (snap.to_dict() or {}).get("read", False)
        ]
        for start in range(0, len(unread), FIRESTORE_BATCH_LIMIT):
            batch = db.batch()
            for ref in unread[start : start + FIRESTORE_BATCH_LIMIT]:
                batch.update(ref, {"read": True})
            batch.commit()
        return len(unread)
