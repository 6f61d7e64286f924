"""Data models for team milestones."""

from __future__ import annotations

import datetime
from typing import Any

from logsphere.core.constants import MILESTONE_STATUSES, MILESTONES_COLLECTION
from logsphere.core.documents import DocumentDecoder
from logsphere.core.types import FirestoreDocument
from logsphere.dates import to_iso_string


class Milestone(FirestoreDocument, total=False):
    """A dated project milestone of a team."""

    teamId: str
    title: str
    description: str
    dueDate: datetime.datetime
    status: str
    createdBy: str


def milestone_from_snapshot(snapshot: Any) -> Milestone:
    """Decode a milestone snapshot."""
    doc = DocumentDecoder(MILESTONES_COLLECTION, snapshot)
    return {
        "id": doc.doc_id,
        "teamId": doc.required("teamId", str),
        "title": doc.required("title", str),
        "description": doc.optional("description", str, ""),
        "dueDate": doc.required("dueDate", datetime.datetime),
        "status": doc.choice("status", MILESTONE_STATUSES),
        "createdBy": doc.optional("createdBy", str, ""),
        "createdAt": doc.data.get("createdAt"),
    }


def milestone_to_json(milestone: Milestone) -> dict[str, Any]:
    """Render a milestone as JSON-safe data."""
    return {
        **milestone,
        "dueDate": to_iso_string(milestone["dueDate"]),
        "createdAt": to_iso_string(milestone.get("createdAt")),
    }
