"""Tests for app setup and the JSON error handlers."""

from __future__ import annotations

import unittest
from unittest.mock import patch

from google.api_core import exceptions as google_exceptions

from logsphere import create_app
from tests.helpers import RouteTestCase


class AppTestCase(RouteTestCase):
    def test_unknown_route_returns_json(self) -> None:
        response = self.client.get("/nowhere")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json, {"success": False, "message": "Not found.", "data": None}
        )

    def test_wrong_method_returns_json(self) -> None:
        response = self.client.put("/notifications/read-all")
        self.assertEqual(response.status_code, 405)
        self.assertFalse(response.json["success"])

    def test_store_failure_is_not_an_empty_list(self) -> None:
        self.add_user("asha")
        self.login("asha")
        with patch(
            "logsphere.notifications.services.NotificationService.list_notifications",
            side_effect=google_exceptions.ServiceUnavailable("down"),
        ):
            response = self.client.get("/notifications/")
        self.assertEqual(response.status_code, 503)
        self.assertFalse(response.json["success"])

    def test_session_user_missing_from_store(self) -> None:
        self.login("ghost")
        response = self.client.get("/user/me")
        self.assertEqual(response.status_code, 401)
        with self.client.session_transaction() as sess:
            self.assertNotIn("user_id", sess)

    def test_code_retry_setting(self) -> None:
        with patch.dict("os.environ", {"LOGSPHERE_CODE_RETRIES": "2"}):
            app = create_app({"TESTING": True})
        self.assertEqual(app.config["TEAM_CODE_MAX_ATTEMPTS"], 2)


class CsrfTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.app = create_app({"TESTING": True})
        self.client = self.app.test_client()

    def test_post_without_token_is_rejected(self) -> None:
        response = self.client.post("/teams/join", json={"code": "ALPHA-AAAAAA"})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json["success"])

    def test_csrf_token_endpoint(self) -> None:
        response = self.client.get("/auth/csrf-token")
        self.assertTrue(response.json["data"]["csrfToken"])


if __name__ == "__main__":
    unittest.main()
