"""Tests for the log approval pipeline."""

from __future__ import annotations

import unittest

from logsphere.core.constants import LOG_STATUSES
from logsphere.errors import IllegalTransitionError, NotFoundError, ValidationError
from logsphere.logs import workflow
from logsphere.logs.repository import LogRepository
from tests.helpers import FirestoreTestCase


class LogWorkflowTestCase(FirestoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.add_user("lead", role="team_lead")
        self.add_user("asha")
        self.add_user("gita", role="guide")
        self.add_user("cora", role="coordinator")
        self.add_user("root", role="admin")
        self.add_team("t1", "lead", member_ids=["asha"], guide_ids=["gita"])
        self.add_log("log1", "t1", 1, "2025-01-01", "2025-01-07", "asha")

    def move(self, uid: str, target: str, comment: str | None = None):
        return workflow.transition(
            self.db, "log1", self.session_for(uid), target, comment
        )

    def notifications(self):
        return [snap.to_dict() for snap in self.db.collection("notifications").stream()]

    def test_happy_path_to_final_approval(self) -> None:
        self.move("asha", "pending-lead")
        self.move("lead", "pending-guide")
        self.move("gita", "approved")
        log = self.move("cora", "final-approved")

        self.assertEqual(log["status"], "final-approved")
        self.assertEqual(log["finalApproval"]["by"], "cora")
        self.assertEqual(log["updatedBy"], "cora")
        self.assertEqual(self.notifications(), [])

    def test_guide_cannot_skip_the_lead(self) -> None:
        self.move("asha", "pending-lead")
        with self.assertRaises(IllegalTransitionError):
            self.move("gita", "approved")
        self.assertEqual(LogRepository.get_log(self.db, "log1")["status"], "pending-lead")

    def test_guide_cannot_move_a_pending_lead_log_anywhere(self) -> None:
        self.move("asha", "pending-lead")
        for target in LOG_STATUSES:
            with self.subTest(target=target):
                with self.assertRaises(IllegalTransitionError):
                    self.move("gita", target, "comment")

    def test_admin_can_force_any_status(self) -> None:
        for target in LOG_STATUSES:
            with self.subTest(target=target):
                self.db.collection("logs").document("log1").update(
                    {"status": "pending-lead"}
                )
                log = self.move("root", target, "forced")
                self.assertEqual(log["status"], target)

    def test_member_cannot_move_someone_elses_log(self) -> None:
        self.add_user("ben")
        with self.assertRaises(IllegalTransitionError):
            self.move("ben", "pending-lead")

    def test_revision_requires_comment(self) -> None:
        self.move("asha", "pending-lead")
        with self.assertRaises(ValidationError):
            self.move("lead", "needs-revision", "   ")
        self.assertEqual(self.notifications(), [])

    def test_revision_appends_comment_and_notifies_author(self) -> None:
        self.move("asha", "pending-lead")
        self.move("lead", "pending-guide")
        log = self.move("gita", "needs-revision", "Add hours for Tuesday")

        self.assertEqual(log["status"], "needs-revision")
        comment = log["comments"][-1]
        self.assertEqual(comment["authorId"], "gita")
        self.assertEqual(comment["role"], "guide")
        self.assertEqual(comment["kind"], "revision")
        self.assertEqual(comment["text"], "Add hours for Tuesday")

        notifications = self.notifications()
        self.assertEqual(len(notifications), 1)
        self.assertEqual(notifications[0]["userId"], "asha")
        self.assertEqual(notifications[0]["logId"], "log1")
        self.assertFalse(notifications[0]["read"])
        self.assertIn("Add hours for Tuesday", notifications[0]["message"])

    def test_resubmission_is_routed_by_reviewer(self) -> None:
        self.move("asha", "pending-lead")
        self.move("lead", "needs-revision", "Too short")
        log = workflow.resubmit(self.db, "log1", self.session_for("asha"))
        self.assertEqual(log["status"], "pending-lead")

        self.move("lead", "pending-guide")
        self.move("gita", "needs-revision", "Missing dates")
        log = workflow.resubmit(self.db, "log1", self.session_for("asha"))
        self.assertEqual(log["status"], "pending-guide")

    def test_coordinator_revision_returns_to_guide(self) -> None:
        self.move("root", "approved")
        self.move("cora", "needs-revision", "Needs a summary")
        self.assertEqual(
            workflow.allowed_targets(
                LogRepository.get_log(self.db, "log1"), self.session_for("asha")
            ),
            ["pending-lead", "pending-guide"],
        )
        log = workflow.resubmit(self.db, "log1", self.session_for("asha"))
        self.assertEqual(log["status"], "pending-guide")

    def test_unknown_status_and_log(self) -> None:
        with self.assertRaises(ValidationError):
            self.move("root", "archived")
        with self.assertRaises(NotFoundError):
            workflow.transition(self.db, "missing", self.session_for("root"), "approved")

    def test_can_edit(self) -> None:
        log = LogRepository.get_log(self.db, "log1")
        self.assertTrue(workflow.can_edit(log, self.session_for("asha")))
        self.assertFalse(workflow.can_edit(log, self.session_for("lead")))
        self.move("asha", "pending-lead")
        log = LogRepository.get_log(self.db, "log1")
        self.assertFalse(workflow.can_edit(log, self.session_for("asha")))
        self.assertTrue(workflow.can_edit(log, self.session_for("root")))

    def test_optional_comment_is_kept_as_note(self) -> None:
        self.move("asha", "pending-lead")
        log = self.move("lead", "pending-guide", "Nice work")
        self.assertEqual(log["comments"][-1]["kind"], "comment")
        self.assertEqual(self.notifications(), [])

    def test_status_label(self) -> None:
        self.assertEqual(workflow.status_label("pending-guide"), "Pending Guide Review")


if __name__ == "__main__":
    unittest.main()
