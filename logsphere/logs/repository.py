"""Storage and validation for weekly logs.

Week-number uniqueness and date-range overlap are checked with plain reads
before the write, so two authors submitting the same week at the same moment
can both pass validation. Membership changes are transactional; log creation
is not.
"""

from __future__ import annotations

import datetime
import uuid
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from logsphere.core.constants import (
    FIRESTORE_IN_QUERY_LIMIT,
    LOGS_COLLECTION,
    STATUS_DRAFT,
)
from logsphere.dates import (
    format_date_for_display,
    ranges_overlap,
    to_storage_instant,
    utcnow,
)
from logsphere.errors import (
    ActivityOutOfRangeError,
    DuplicateWeekError,
    InvalidDateError,
    OverlappingRangeError,
    ValidationError,
)

from .models import (
    COMMENT_KIND_NOTE,
    Activity,
    Comment,
    Log,
    log_from_snapshot,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction

    from logsphere.user.models import UserSession

EDITABLE_FIELDS = ("weekNumber", "startDate", "endDate", "activities")


def parse_week_number(value: Any) -> int:
    """Coerce a week number, which must be a positive integer."""
    if isinstance(value, bool):
        raise ValidationError("Week number must be a positive integer.")
    try:
        week = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Week number must be a positive integer.") from None
    if week < 1 or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError("Week number must be a positive integer.")
    return week


def parse_activities(raw_activities: Any) -> list[Activity]:
    """Normalize activity input, converting dates to storage instants."""
    if raw_activities is None:
        return []
    if not isinstance(raw_activities, list):
        raise ValidationError("Activities must be a list.")

    activities: list[Activity] = []
    for raw in raw_activities:
        if not isinstance(raw, dict):
            raise ValidationError("Each activity must be an object.")
        hours = raw.get("hours", 0)
        try:
            hours = float(hours) if not isinstance(hours, bool) else None
        except (TypeError, ValueError):
            hours = None
        if hours is None or hours < 0:
            raise ValidationError("Activity hours must be a non-negative number.")
        activities.append(
            {
                "id": str(raw.get("id") or uuid.uuid4().hex),
                "date": to_storage_instant(raw.get("date")),
                "hours": int(hours) if hours.is_integer() else hours,
                "description": str(raw.get("description") or "").strip(),
            }
        )
    return activities


def parse_date_range(start: Any, end: Any) -> tuple[datetime.datetime, datetime.datetime]:
    """Normalize a log's start and end dates and check their order."""
    start_instant = to_storage_instant(start)
    end_instant = to_storage_instant(end)
    if start_instant > end_instant:
        raise InvalidDateError("Start date must be on or before the end date.")
    return start_instant, end_instant


def validate_activity_dates(
    activities: list[Activity], start: Any, end: Any
) -> None:
    """Raise if any activity falls outside [start, end], inclusive."""
    start_instant = to_storage_instant(start)
    end_instant = to_storage_instant(end)
    for activity in activities:
        activity_date = to_storage_instant(activity["date"])
        if activity_date < start_instant or activity_date > end_instant:
            raise ActivityOutOfRangeError(
                f"Activity date {format_date_for_display(activity_date)} is "
                f"outside the log date range ("
                f"{format_date_for_display(start_instant)} - "
                f"{format_date_for_display(end_instant)})"
            )


def new_comment(actor: UserSession, text: str, kind: str = COMMENT_KIND_NOTE) -> Comment:
    """Build a comment authored by ``actor``."""
    return {
        "id": uuid.uuid4().hex,
        "authorId": actor.uid,
        "authorName": actor.name,
        "role": actor.role,
        "text": text.strip(),
        "kind": kind,
        "createdAt": utcnow(),
    }


class LogRepository:
    """Data access for the logs collection."""

    @staticmethod
    def _team_logs(db: Client, team_id: str) -> list[Log]:
        query = db.collection(LOGS_COLLECTION).where(
            filter=firestore.FieldFilter("teamId", "==", team_id)
        )
        return [log_from_snapshot(snap) for snap in query.stream()]

    @staticmethod
    def is_week_number_exists(
        db: Client, week_number: int, team_id: str | None, exclude_id: str | None = None
    ) -> bool:
        """Return True if another log of the team already uses the week."""
        if not team_id:
            return False
        query = (
            db.collection(LOGS_COLLECTION)
            .where(filter=firestore.FieldFilter("teamId", "==", team_id))
            .where(filter=firestore.FieldFilter("weekNumber", "==", week_number))
        )
        return any(doc.id != exclude_id for doc in query.stream())

    @staticmethod
    def is_date_range_overlapping(
        db: Client,
        start: Any,
        end: Any,
        team_id: str | None,
        exclude_id: str | None = None,
    ) -> bool:
        """Return True if [start, end] overlaps another log of the team."""
        if not team_id:
            return False
        return any(
            ranges_overlap(start, end, log["startDate"], log["endDate"])
            for log in LogRepository._team_logs(db, team_id)
            if log["id"] != exclude_id
        )

    @staticmethod
    def get_log(db: Client, log_id: str) -> Log:
        """Fetch a log or raise NotFoundError."""
        return log_from_snapshot(db.collection(LOGS_COLLECTION).document(log_id).get())

    @staticmethod
    def list_logs_for_team(db: Client, team_id: str) -> list[Log]:
        """Fetch a team's logs ordered by week."""
        return sorted(
            LogRepository._team_logs(db, team_id), key=lambda log: log["weekNumber"]
        )

    @staticmethod
    def list_logs_for_teams(db: Client, team_ids: list[str]) -> list[Log]:
        """Fetch the logs of several teams ordered by team then week."""
        logs: list[Log] = []
        for i in range(0, len(team_ids), FIRESTORE_IN_QUERY_LIMIT):
            chunk = team_ids[i : i + FIRESTORE_IN_QUERY_LIMIT]
            query = db.collection(LOGS_COLLECTION).where(
                filter=firestore.FieldFilter("teamId", "in", chunk)
            )
            logs.extend(log_from_snapshot(snap) for snap in query.stream())
        return sorted(logs, key=lambda log: (log["teamId"] or "", log["weekNumber"]))

    @staticmethod
    def list_logs_by_user(db: Client, user_id: str) -> list[Log]:
        """Fetch the logs a user authored."""
        query = db.collection(LOGS_COLLECTION).where(
            filter=firestore.FieldFilter("createdBy", "==", user_id)
        )
        logs = [log_from_snapshot(snap) for snap in query.stream()]
        return sorted(logs, key=lambda log: log["startDate"])

    @staticmethod
    def list_all_logs(db: Client) -> list[Log]:
        """Fetch every log."""
        logs = [log_from_snapshot(s) for s in db.collection(LOGS_COLLECTION).stream()]
        return sorted(logs, key=lambda log: (log["teamId"] or "", log["weekNumber"]))

    @staticmethod
    def create_log(db: Client, candidate: dict[str, Any], author: UserSession) -> Log:
        """Validate and store a new draft log."""
        team_id = candidate.get("teamId") or None
        week_number = parse_week_number(candidate.get("weekNumber"))
        start, end = parse_date_range(candidate.get("startDate"), candidate.get("endDate"))
        activities = parse_activities(candidate.get("activities"))

        if LogRepository.is_week_number_exists(db, week_number, team_id):
            raise DuplicateWeekError(week_number)
        if LogRepository.is_date_range_overlapping(db, start, end, team_id):
            raise OverlappingRangeError()
        validate_activity_dates(activities, start, end)

        now = utcnow()
        data: dict[str, Any] = {
            "teamId": team_id,
            "weekNumber": week_number,
            "startDate": start,
            "endDate": end,
            "activities": activities,
            "status": STATUS_DRAFT,
            "createdBy": author.uid,
            "createdByName": author.name,
            "comments": [],
            "createdAt": now,
            "updatedAt": now,
        }
        log_ref = db.collection(LOGS_COLLECTION).document()
        log_ref.set(data)
        current_app.logger.info(
            f"Log {log_ref.id} (week {week_number}) created by {author.uid}"
        )
        return log_from_snapshot(log_ref.get())

    @staticmethod
    def update_log(
        db: Client, log_id: str, patch: dict[str, Any], editor: UserSession
    ) -> Log:
        """Apply an edit to a log's week, dates or activities.

        Author, status, team and comments are never taken from the patch.
        """
        log_ref = db.collection(LOGS_COLLECTION).document(log_id)
        current = log_from_snapshot(log_ref.get())
        team_id = current["teamId"]

        week_number = current["weekNumber"]
        if "weekNumber" in patch:
            week_number = parse_week_number(patch["weekNumber"])
        start, end = parse_date_range(
            patch.get("startDate", current["startDate"]),
            patch.get("endDate", current["endDate"]),
        )
        activities = (
            parse_activities(patch["activities"])
            if "activities" in patch
            else current["activities"]
        )

        if week_number != current["weekNumber"] and LogRepository.is_week_number_exists(
            db, week_number, team_id, exclude_id=log_id
        ):
            raise DuplicateWeekError(week_number)
        range_changed = start != current["startDate"] or end != current["endDate"]
        if range_changed and LogRepository.is_date_range_overlapping(
            db, start, end, team_id, exclude_id=log_id
        ):
            raise OverlappingRangeError()
        validate_activity_dates(activities, start, end)

        log_ref.update(
            {
                "weekNumber": week_number,
                "startDate": start,
                "endDate": end,
                "activities": activities,
                "updatedAt": utcnow(),
                "updatedBy": editor.uid,
            }
        )
        return log_from_snapshot(log_ref.get())

    @staticmethod
    def delete_log(db: Client, log_id: str) -> None:
        """Delete a log."""
        LogRepository.get_log(db, log_id)
        db.collection(LOGS_COLLECTION).document(log_id).delete()
        current_app.logger.info(f"Log {log_id} deleted")

    @staticmethod
    def add_comment(db: Client, log_id: str, author: UserSession, text: str) -> Log:
        """Append a comment to a log without changing its status."""
        if not (text or "").strip():
            raise ValidationError("Comment text is required.")
        log_ref = db.collection(LOGS_COLLECTION).document(log_id)

        @firestore.transactional
        def comment_in_transaction(
            transaction: Transaction, log_ref: DocumentReference
        ) -> None:
            log = log_from_snapshot(log_ref.get(transaction=transaction))
            transaction.update(
                log_ref,
                {
                    "comments": [*log["comments"], new_comment(author, text)],
                    "updatedAt": utcnow(),
                },
            )

        comment_in_transaction(db.transaction(), log_ref)
        return LogRepository.get_log(db, log_id)
