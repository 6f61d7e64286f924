"""Tests for the email helpers."""

from __future__ import annotations

import smtplib
import unittest
from unittest.mock import patch

from logsphere import create_app
from logsphere.utils import EmailError, build_email, send_email

TEAM = {"name": "Alpha"}


class EmailTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.app = create_app({"TESTING": True, "MAIL_DEFAULT_SENDER": "no@uni.edu"})
        self.app_context = self.app.app_context()
        self.app_context.push()
        self.addCleanup(self.app_context.pop)

    def test_build_email_renders_invitation(self) -> None:
        message = build_email(
            "asha@uni.edu",
            "Join Alpha",
            "email/team_invitation.html",
            team=TEAM,
            role="member",
            inviter_name="Lena",
        )
        self.assertEqual(message.recipients, ["asha@uni.edu"])
        self.assertEqual(message.sender, "no@uni.edu")
        self.assertIn("Lena has invited you", " ".join(message.html.split()))
        self.assertIn("<strong>Alpha</strong>", message.html)

    @patch("logsphere.utils.mail.send")
    def test_app_password_error(self, mock_send) -> None:
        mock_send.side_effect = smtplib.SMTPAuthenticationError(534, b"App password")
        with self.assertRaises(EmailError) as ctx:
            send_email(
                "asha@uni.edu", "Join", "email/team_invitation.html",
                team=TEAM, role="member", inviter_name="Lena",
            )
        self.assertIn("app password", str(ctx.exception))

    @patch("logsphere.utils.mail.send")
    def test_connection_error(self, mock_send) -> None:
        mock_send.side_effect = ConnectionRefusedError("refused")
        with self.assertRaises(EmailError):
            send_email(
                "asha@uni.edu", "Join", "email/team_invitation.html",
                team=TEAM, role="member", inviter_name="Lena",
            )

    @patch("logsphere.utils.mail.send")
    def test_missing_template(self, mock_send) -> None:
        with self.assertRaises(EmailError) as ctx:
            send_email("asha@uni.edu", "Join", "email/missing.html")
        self.assertIn("email/missing.html", str(ctx.exception))
        mock_send.assert_not_called()


if __name__ == "__main__":
    unittest.main()
