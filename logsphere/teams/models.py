"""Data models for the teams feature."""

from __future__ import annotations

from typing import Any

from logsphere.core.constants import TEAMS_COLLECTION
from logsphere.core.documents import DocumentDecoder
from logsphere.core.types import FirestoreDocument


class Team(FirestoreDocument, total=False):
    """A team document in Firestore."""

    name: str
    referralCode: str
    guideCode: str
    leaderId: str
    memberIds: list[str]
    guideIds: list[str]


def team_from_snapshot(snapshot: Any) -> Team:
    """Decode a team snapshot."""
    doc = DocumentDecoder(TEAMS_COLLECTION, snapshot)
    return {
        "id": doc.doc_id,
        "name": doc.required("name", str),
        "referralCode": doc.required("referralCode", str),
        "guideCode": doc.required("guideCode", str),
        "leaderId": doc.required("leaderId", str),
        "memberIds": doc.string_list("memberIds"),
        "guideIds": doc.string_list("guideIds"),
        "createdAt": doc.data.get("createdAt"),
    }


def roster_field(role: str) -> str:
    """Return the team field that holds users of the given roster role."""
    return "guideIds" if role == "guide" else "memberIds"
