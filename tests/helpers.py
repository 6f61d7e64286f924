"""Shared fixtures for the Firestore-backed test cases."""

from __future__ import annotations

import unittest
from typing import Any
from unittest.mock import patch

from logsphere import create_app
from logsphere.dates import to_storage_instant, utcnow
from logsphere.user.models import UserSession, user_from_snapshot
from tests.mock_utils import MockFirestoreBuilder


class FirestoreTestCase(unittest.TestCase):
    """Runs each test in an app context against a fresh MockFirestore."""

    def setUp(self) -> None:
        self.db = MockFirestoreBuilder.build_db()

        transactional = MockFirestoreBuilder.patch_transactional()
        transactional.start()
        self.addCleanup(transactional.stop)

        self.app = create_app({"TESTING": True, "WTF_CSRF_ENABLED": False})
        self.app_context = self.app.app_context()
        self.app_context.push()
        self.addCleanup(self.app_context.pop)

    def add_user(
        self,
        uid: str,
        name: str | None = None,
        role: str = "member",
        email: str | None = None,
        team_ids: list[str] | None = None,
    ) -> None:
        self.db.collection("users").document(uid).set(
            {
                "name": name or uid.capitalize(),
                "email": email or f"{uid}@example.com",
                "role": role,
                "teamIds": list(team_ids or []),
                "createdAt": utcnow(),
            }
        )

    def session_for(self, uid: str) -> UserSession:
        return UserSession(
            user_from_snapshot(self.db.collection("users").document(uid).get())
        )

    def add_team(
        self,
        team_id: str,
        leader_id: str,
        name: str = "Alpha",
        member_ids: list[str] | None = None,
        guide_ids: list[str] | None = None,
        referral_code: str = "ALPHA-AAAAAA",
        guide_code: str = "ALPHA-G-AAAAAA",
    ) -> None:
        self.db.collection("teams").document(team_id).set(
            {
                "name": name,
                "referralCode": referral_code,
                "guideCode": guide_code,
                "leaderId": leader_id,
                "memberIds": list(member_ids or []),
                "guideIds": list(guide_ids or []),
                "createdAt": utcnow(),
            }
        )
        for uid in [leader_id, *(member_ids or []), *(guide_ids or [])]:
            ref = self.db.collection("users").document(uid)
            snap = ref.get()
            if snap.exists:
                team_ids = snap.to_dict().get("teamIds", [])
                if team_id not in team_ids:
                    ref.update({"teamIds": [*team_ids, team_id]})

    def add_log(
        self,
        log_id: str,
        team_id: str | None,
        week_number: int,
        start: str,
        end: str,
        created_by: str,
        status: str = "draft",
        activities: list[dict[str, Any]] | None = None,
        comments: list[dict[str, Any]] | None = None,
    ) -> None:
        now = utcnow()
        self.db.collection("logs").document(log_id).set(
            {
                "teamId": team_id,
                "weekNumber": week_number,
                "startDate": to_storage_instant(start),
                "endDate": to_storage_instant(end),
                "activities": list(activities or []),
                "status": status,
                "createdBy": created_by,
                "createdByName": created_by.capitalize(),
                "comments": list(comments or []),
                "createdAt": now,
                "updatedAt": now,
            }
        )

    def doc(self, collection: str, doc_id: str) -> dict[str, Any]:
        return self.db.collection(collection).document(doc_id).get().to_dict() or {}


class RouteTestCase(FirestoreTestCase):
    """Drives the app through its test client with Firestore mocked out."""

    def setUp(self) -> None:
        super().setUp()
        client_patch = patch("firebase_admin.firestore.client", return_value=self.db)
        client_patch.start()
        self.addCleanup(client_patch.stop)
        self.client = self.app.test_client()

    def login(self, uid: str) -> None:
        with self.client.session_transaction() as sess:
            sess["user_id"] = uid
