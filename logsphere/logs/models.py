"""Data models for weekly logs."""

from __future__ import annotations

import datetime
from typing import Any, TypedDict

from logsphere.core.constants import LOG_STATUSES, LOGS_COLLECTION
from logsphere.core.documents import DocumentDecoder
from logsphere.core.types import FirestoreDocument
from logsphere.dates import format_date_range, to_iso_string

COMMENT_KIND_NOTE = "comment"
COMMENT_KIND_REVISION = "revision"


class Activity(TypedDict):
    """One dated piece of work inside a log."""

    id: str
    date: datetime.datetime
    hours: float
    description: str


class Comment(TypedDict):
    """A reviewer or author comment on a log."""

    id: str
    authorId: str
    authorName: str
    role: str
    text: str
    kind: str
    createdAt: Any


class FinalApproval(TypedDict):
    """Who gave the final approval, and when."""

    by: str
    timestamp: Any


class Log(FirestoreDocument, total=False):
    """A weekly log document in Firestore."""

    teamId: str | None
    weekNumber: int
    startDate: datetime.datetime
    endDate: datetime.datetime
    activities: list[Activity]
    status: str
    createdBy: str
    createdByName: str
    updatedBy: str
    comments: list[Comment]
    finalApproval: FinalApproval


def _activity(doc: DocumentDecoder, index: int, raw: Any) -> Activity:
    if not isinstance(raw, dict):
        raise doc.fail(f"activity {index} is not a map")
    date = raw.get("date")
    hours = raw.get("hours", 0)
    if not isinstance(date, datetime.datetime):
        raise doc.fail(f"activity {index} has no date")
    if isinstance(hours, bool) or not isinstance(hours, (int, float)) or hours < 0:
        raise doc.fail(f"activity {index} has invalid hours")
    return {
        "id": str(raw.get("id") or index),
        "date": date,
        "hours": hours,
        "description": str(raw.get("description") or ""),
    }


def _comment(doc: DocumentDecoder, index: int, raw: Any) -> Comment:
    if not isinstance(raw, dict) or not isinstance(raw.get("text"), str):
        raise doc.fail(f"comment {index} is malformed")
    return {
        "id": str(raw.get("id") or index),
        "authorId": str(raw.get("authorId") or ""),
        "authorName": str(raw.get("authorName") or ""),
        "role": str(raw.get("role") or ""),
        "text": raw["text"],
        "kind": str(raw.get("kind") or COMMENT_KIND_NOTE),
        "createdAt": raw.get("createdAt"),
    }


def log_from_snapshot(snapshot: Any) -> Log:
    """Decode a log snapshot, failing closed on malformed documents."""
    doc = DocumentDecoder(LOGS_COLLECTION, snapshot)
    log: Log = {
        "id": doc.doc_id,
        "teamId": doc.optional("teamId", str),
        "weekNumber": doc.required("weekNumber", int),
        "startDate": doc.required("startDate", datetime.datetime),
        "endDate": doc.required("endDate", datetime.datetime),
        "status": doc.choice("status", LOG_STATUSES),
        "createdBy": doc.required("createdBy", str),
        "createdByName": doc.optional("createdByName", str, ""),
        "activities": [
            _activity(doc, i, raw)
            for i, raw in enumerate(doc.optional("activities", list, []))
        ],
        "comments": [
            _comment(doc, i, raw)
            for i, raw in enumerate(doc.optional("comments", list, []))
        ],
        "createdAt": doc.data.get("createdAt"),
        "updatedAt": doc.data.get("updatedAt"),
    }
    if doc.data.get("updatedBy"):
        log["updatedBy"] = doc.required("updatedBy", str)
    if doc.data.get("finalApproval"):
        approval = doc.required("finalApproval", dict)
        log["finalApproval"] = {
            "by": str(approval.get("by") or ""),
            "timestamp": approval.get("timestamp"),
        }
    return log


def total_hours(log: Log) -> float:
    """Sum the hours of every activity in a log."""
    return sum(activity["hours"] for activity in log.get("activities", []))


def log_to_json(log: Log) -> dict[str, Any]:
    """Render a log as JSON-safe data."""
    data: dict[str, Any] = dict(log)
    data["startDate"] = to_iso_string(log["startDate"])
    data["endDate"] = to_iso_string(log["endDate"])
    data["dateRange"] = format_date_range(log["startDate"], log["endDate"])
    data["createdAt"] = to_iso_string(log.get("createdAt"))
    data["updatedAt"] = to_iso_string(log.get("updatedAt"))
    data["totalHours"] = total_hours(log)
    data["activities"] = [
        {**activity, "date": to_iso_string(activity["date"])}
        for activity in log.get("activities", [])
    ]
    data["comments"] = [
        {**comment, "createdAt": to_iso_string(comment["createdAt"])}
        for comment in log.get("comments", [])
    ]
    if "finalApproval" in log:
        data["finalApproval"] = {
            "by": log["finalApproval"]["by"],
            "timestamp": to_iso_string(log["finalApproval"]["timestamp"]),
        }
    return data
