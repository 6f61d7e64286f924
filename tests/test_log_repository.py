"""Tests for log storage and validation."""

from __future__ import annotations

import datetime
import unittest

from logsphere.errors import (
    ActivityOutOfRangeError,
    DuplicateWeekError,
    InvalidDateError,
    NotFoundError,
    OverlappingRangeError,
    ValidationError,
)
from logsphere.logs.repository import LogRepository
from tests.helpers import FirestoreTestCase

UTC = datetime.timezone.utc


class LogRepositoryTestCase(FirestoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.add_user("lead", role="team_lead")
        self.add_user("asha")
        self.add_team("t1", "lead", member_ids=["asha"])
        self.add_log("week1", "t1", 1, "2025-01-01", "2025-01-07", "asha")
        self.author = self.session_for("asha")

    def candidate(self, **overrides):
        data = {
            "teamId": "t1",
            "weekNumber": 2,
            "startDate": "2025-01-08",
            "endDate": "2025-01-14",
            "activities": [
                {"date": "2025-01-09", "hours": 3, "description": "Wireframes"}
            ],
        }
        data.update(overrides)
        return data

    def log_count(self) -> int:
        return len(list(self.db.collection("logs").stream()))

    def test_create_log(self) -> None:
        log = LogRepository.create_log(self.db, self.candidate(), self.author)

        self.assertEqual(log["status"], "draft")
        self.assertEqual(log["createdBy"], "asha")
        self.assertEqual(log["createdByName"], "Asha")
        self.assertEqual(log["startDate"], datetime.datetime(2025, 1, 8, tzinfo=UTC))
        self.assertEqual(log["activities"][0]["hours"], 3)
        self.assertTrue(log["activities"][0]["id"])
        self.assertEqual(log["comments"], [])
        self.assertEqual(log["createdAt"], log["updatedAt"])
        self.assertEqual(self.log_count(), 2)

    def test_duplicate_week_rejected(self) -> None:
        with self.assertRaises(DuplicateWeekError):
            LogRepository.create_log(
                self.db,
                self.candidate(weekNumber=1, startDate="2025-02-01", endDate="2025-02-07",
                               activities=[]),
                self.author,
            )
        self.assertEqual(self.log_count(), 1)

    def test_shared_boundary_day_overlaps(self) -> None:
        with self.assertRaises(OverlappingRangeError):
            LogRepository.create_log(
                self.db,
                self.candidate(startDate="2025-01-07", endDate="2025-01-14",
                               activities=[]),
                self.author,
            )
        self.assertEqual(self.log_count(), 1)

    def test_adjacent_range_does_not_overlap(self) -> None:
        self.assertFalse(
            LogRepository.is_date_range_overlapping(
                self.db, "2025-01-08", "2025-01-14", "t1"
            )
        )
        self.assertTrue(
            LogRepository.is_date_range_overlapping(
                self.db, "2024-12-25", "2025-01-01", "t1"
            )
        )

    def test_activity_outside_range_rejected(self) -> None:
        with self.assertRaises(ActivityOutOfRangeError) as ctx:
            LogRepository.create_log(
                self.db,
                self.candidate(
                    activities=[{"date": "2025-01-15", "hours": 2, "description": "x"}]
                ),
                self.author,
            )
        self.assertIn("Jan 15, 2025", ctx.exception.message)
        self.assertEqual(self.log_count(), 1)

    def test_start_after_end_rejected(self) -> None:
        with self.assertRaises(InvalidDateError):
            LogRepository.create_log(
                self.db,
                self.candidate(startDate="2025-01-14", endDate="2025-01-08"),
                self.author,
            )

    def test_invalid_week_and_hours(self) -> None:
        for overrides in (
            {"weekNumber": 0},
            {"weekNumber": "two"},
            {"activities": [{"date": "2025-01-09", "hours": -1}]},
        ):
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationError):
                    LogRepository.create_log(
                        self.db, self.candidate(**overrides), self.author
                    )

    def test_logs_without_team_skip_uniqueness(self) -> None:
        self.assertFalse(LogRepository.is_week_number_exists(self.db, 1, None))
        self.assertFalse(
            LogRepository.is_date_range_overlapping(
                self.db, "2025-01-01", "2025-01-07", None
            )
        )

    def test_update_excludes_itself(self) -> None:
        log = LogRepository.update_log(
            self.db,
            "week1",
            {"startDate": "2025-01-02", "endDate": "2025-01-07"},
            self.author,
        )
        self.assertEqual(log["startDate"], datetime.datetime(2025, 1, 2, tzinfo=UTC))
        self.assertEqual(log["updatedBy"], "asha")

    def test_update_revalidates_activities(self) -> None:
        with self.assertRaises(ActivityOutOfRangeError):
            LogRepository.update_log(
                self.db,
                "week1",
                {"activities": [{"date": "2025-01-08", "hours": 1}]},
                self.author,
            )

    def test_update_rejects_taken_week(self) -> None:
        self.add_log("week2", "t1", 2, "2025-01-08", "2025-01-14", "asha")
        with self.assertRaises(DuplicateWeekError):
            LogRepository.update_log(self.db, "week2", {"weekNumber": 1}, self.author)

    def test_update_ignores_protected_fields(self) -> None:
        log = LogRepository.update_log(
            self.db,
            "week1",
            {"createdBy": "mallory", "status": "final-approved", "teamId": "t2"},
            self.author,
        )
        self.assertEqual(log["createdBy"], "asha")
        self.assertEqual(log["status"], "draft")
        self.assertEqual(log["teamId"], "t1")

    def test_update_unknown_log(self) -> None:
        with self.assertRaises(NotFoundError):
            LogRepository.update_log(self.db, "missing", {}, self.author)

    def test_add_comment_keeps_status(self) -> None:
        log = LogRepository.add_comment(self.db, "week1", self.author, " Looks good ")
        self.assertEqual(log["status"], "draft")
        self.assertEqual(log["comments"][0]["text"], "Looks good")
        self.assertEqual(log["comments"][0]["kind"], "comment")

    def test_list_logs_for_teams(self) -> None:
        self.add_user("ravi")
        self.add_team("t2", "ravi", name="Beta")
        self.add_log("other", "t2", 1, "2025-01-01", "2025-01-07", "ravi")
        logs = LogRepository.list_logs_for_teams(self.db, ["t1", "t2"])
        self.assertEqual([log["id"] for log in logs], ["week1", "other"])


if __name__ == "__main__":
    unittest.main()
