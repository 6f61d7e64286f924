"""Tests for team invitations and join requests."""

from __future__ import annotations

import unittest
from unittest.mock import patch

from logsphere.errors import (
    DuplicateResourceError,
    InvalidCodeError,
    PermissionDeniedError,
    ValidationError,
)
from logsphere.invitations.services import InvitationService
from logsphere.invitations.tasks import send_invitation_email_background
from logsphere.utils import EmailError
from tests.helpers import FirestoreTestCase


class InvitationServiceTestCase(FirestoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.add_user("lead", role="team_lead")
        self.add_user("asha", email="asha@example.com")
        self.add_team("t1", "lead")

        email_patch = patch(
            "logsphere.invitations.services.send_invitation_email_background"
        )
        self.mock_send = email_patch.start()
        self.addCleanup(email_patch.stop)

    def invite(self, email: str = "Asha@Example.com", role: str = "member"):
        return InvitationService.create_invitation(
            self.db, "t1", email, role, self.session_for("lead")
        )

    def test_create_invitation(self) -> None:
        invitation = self.invite()

        self.assertEqual(invitation["invitedEmail"], "asha@example.com")
        self.assertEqual(invitation["status"], "pending")
        self.assertEqual(invitation["type"], "invite")
        self.assertEqual(invitation["teamName"], "Alpha")
        self.mock_send.assert_called_once()
        email_data = self.mock_send.call_args[0][3]
        self.assertEqual(email_data["to"], "asha@example.com")
        self.assertEqual(email_data["template"], "email/team_invitation.html")

    def test_duplicate_and_bad_invitations(self) -> None:
        self.invite()
        with self.assertRaises(DuplicateResourceError):
            self.invite("asha@example.com")
        with self.assertRaises(ValidationError):
            self.invite("ben@example.com", role="admin")

    def test_accept_invitation_joins_team(self) -> None:
        invitation = self.invite(role="guide")
        accepted = InvitationService.accept_invitation(
            self.db, invitation["id"], self.session_for("asha")
        )

        self.assertEqual(accepted["status"], "accepted")
        self.assertEqual(self.doc("teams", "t1")["guideIds"], ["asha"])
        self.assertEqual(self.doc("users", "asha")["role"], "guide")
        self.assertEqual(
            InvitationService.list_pending_for_email(self.db, "asha@example.com"), []
        )

    def test_accept_someone_elses_invitation(self) -> None:
        self.add_user("ben")
        invitation = self.invite()
        with self.assertRaises(PermissionDeniedError):
            InvitationService.accept_invitation(
                self.db, invitation["id"], self.session_for("ben")
            )

    def test_decline_and_cancel(self) -> None:
        invitation = self.invite()
        InvitationService.decline_invitation(
            self.db, invitation["id"], self.session_for("asha")
        )
        self.assertEqual(self.doc("invitations", invitation["id"])["status"], "declined")

        other = self.invite("ben@example.com")
        InvitationService.cancel_invitation(self.db, other["id"])
        self.assertFalse(
            self.db.collection("invitations").document(other["id"]).get().exists
        )

    def test_join_request_flow(self) -> None:
        stale = self.invite()
        request = InvitationService.request_to_join(
            self.db, "ALPHA-AAAAAA", self.session_for("asha")
        )
        self.assertEqual(request["type"], "request")

        self.assertEqual(
            len(InvitationService.list_pending_for_team(self.db, "t1")), 2
        )
        self.assertEqual(
            [r["id"] for r in InvitationService.list_requests_by_user(self.db, "asha")],
            [request["id"]],
        )
        lead_notes = list(
            self.db.collection("notifications")
            .where("userId", "==", "lead")
            .stream()
        )
        self.assertEqual(len(lead_notes), 1)

        approved = InvitationService.approve_join_request(self.db, request["id"])

        self.assertEqual(approved["status"], "approved")
        self.assertEqual(self.doc("teams", "t1")["memberIds"], ["asha"])
        self.assertFalse(
            self.db.collection("invitations").document(stale["id"]).get().exists
        )
        asha_notes = list(
            self.db.collection("notifications")
            .where("userId", "==", "asha")
            .stream()
        )
        self.assertEqual(len(asha_notes), 1)

    def test_request_rejections(self) -> None:
        with self.assertRaises(InvalidCodeError):
            InvitationService.request_to_join(
                self.db, "NOPE-000000", self.session_for("asha")
            )
        InvitationService.request_to_join(
            self.db, "ALPHA-G-AAAAAA", self.session_for("asha")
        )
        with self.assertRaises(DuplicateResourceError):
            InvitationService.request_to_join(
                self.db, "ALPHA-AAAAAA", self.session_for("asha")
            )
        with self.assertRaises(DuplicateResourceError):
            InvitationService.request_to_join(
                self.db, "ALPHA-AAAAAA", self.session_for("lead")
            )

    def test_reject_request(self) -> None:
        request = InvitationService.request_to_join(
            self.db, "ALPHA-AAAAAA", self.session_for("asha")
        )
        InvitationService.reject_join_request(self.db, request["id"])
        self.assertEqual(self.doc("invitations", request["id"])["status"], "rejected")
        self.assertEqual(self.doc("teams", "t1")["memberIds"], [])

        invitation = self.invite("ben@example.com")
        with self.assertRaises(ValidationError):
            InvitationService.approve_join_request(self.db, invitation["id"])

    def test_answered_invitation_cannot_be_declined(self) -> None:
        invitation = self.invite()
        InvitationService.accept_invitation(
            self.db, invitation["id"], self.session_for("asha")
        )

        with self.assertRaises(ValidationError):
            InvitationService.decline_invitation(
                self.db, invitation["id"], self.session_for("asha")
            )
        self.assertEqual(self.doc("invitations", invitation["id"])["status"], "accepted")
        self.assertEqual(self.doc("teams", "t1")["memberIds"], ["asha"])

    def test_approved_request_cannot_be_rejected(self) -> None:
        request = InvitationService.request_to_join(
            self.db, "ALPHA-AAAAAA", self.session_for("asha")
        )
        InvitationService.approve_join_request(self.db, request["id"])

        with self.assertRaises(ValidationError):
            InvitationService.reject_join_request(self.db, request["id"])
        self.assertEqual(self.doc("invitations", request["id"])["status"], "approved")
        with self.assertRaises(ValidationError):
            InvitationService.approve_join_request(self.db, request["id"])


class InvitationEmailTaskTestCase(FirestoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.db.collection("invitations").document("i1").set(
            {"teamId": "t1", "status": "pending"}
        )

    @patch("logsphere.invitations.tasks.send_email")
    def test_records_sent_email(self, mock_send_email) -> None:
        thread = send_invitation_email_background(
            self.app, self.db, "i1", {"to": "a@example.com"}
        )
        thread.join()
        mock_send_email.assert_called_once_with(to="a@example.com")
        self.assertEqual(self.doc("invitations", "i1")["emailStatus"], "sent")

    @patch("logsphere.invitations.tasks.send_email")
    def test_records_failed_email(self, mock_send_email) -> None:
        mock_send_email.side_effect = EmailError("SMTP down")
        thread = send_invitation_email_background(
            self.app, self.db, "i1", {"to": "a@example.com"}
        )
        thread.join()
        invitation = self.doc("invitations", "i1")
        self.assertEqual(invitation["emailStatus"], "failed")
        self.assertEqual(invitation["lastError"], "SMTP down")

    @patch("logsphere.utils.mail.send")
    def test_records_render_failure(self, mock_mail_send) -> None:
        thread = send_invitation_email_background(
            self.app,
            self.db,
            "i1",
            {"to": "a@example.com", "subject": "Join", "template": "email/missing.html"},
        )
        thread.join()
        invitation = self.doc("invitations", "i1")
        self.assertEqual(invitation["emailStatus"], "failed")
        self.assertIn("email/missing.html", invitation["lastError"])
        mock_mail_send.assert_not_called()


if __name__ == "__main__":
    unittest.main()
