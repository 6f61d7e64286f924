"""Tests for NotificationService."""

from __future__ import annotations

import datetime
import unittest

from logsphere.errors import NotFoundError, PermissionDeniedError
from logsphere.notifications.services import NotificationService
from tests.helpers import FirestoreTestCase


class NotificationServiceTestCase(FirestoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        base = datetime.datetime(2025, 1, 1, tzinfo=datetime.timezone.utc)
        for i, user_id in enumerate(["asha", "asha", "asha", "ben"]):
            self.db.collection("notifications").document(f"n{i}").set(
                {
                    "userId": user_id,
                    "title": "Update",
                    "message": f"Message {i}",
                    "logId": None,
                    "read": i == 0,
                    "createdAt": base + datetime.timedelta(hours=i),
                }
            )

    def test_list_is_newest_first(self) -> None:
        notifications = NotificationService.list_notifications(self.db, "asha")
        self.assertEqual([n["id"] for n in notifications], ["n2", "n1", "n0"])

    def test_create_notification(self) -> None:
        created = NotificationService.create_notification(
            self.db, "ben", "Hello", "Welcome aboard", log_id="log1"
        )
        self.assertFalse(created["read"])
        self.assertEqual(self.doc("notifications", created["id"])["logId"], "log1")
        self.assertEqual(NotificationService.unread_count(self.db, "ben"), 2)

    def test_mark_read(self) -> None:
        NotificationService.mark_read(self.db, "n1", "asha")
        self.assertTrue(self.doc("notifications", "n1")["read"])
        self.assertEqual(NotificationService.unread_count(self.db, "asha"), 1)

    def test_mark_read_checks_owner(self) -> None:
        with self.assertRaises(PermissionDeniedError):
            NotificationService.mark_read(self.db, "n3", "asha")
        with self.assertRaises(NotFoundError):
            NotificationService.mark_read(self.db, "missing", "asha")

    def test_mark_all_read(self) -> None:
        self.assertEqual(NotificationService.mark_all_read(self.db, "asha"), 2)
        self.assertEqual(NotificationService.unread_count(self.db, "asha"), 0)
        self.assertEqual(NotificationService.unread_count(self.db, "ben"), 1)


if __name__ == "__main__":
    unittest.main()
