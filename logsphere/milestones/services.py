"""Service layer for team milestones."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from logsphere.core.constants import MILESTONE_STATUSES, MILESTONES_COLLECTION
from logsphere.dates import to_storage_instant, utcnow
from logsphere.errors import ValidationError

from .models import Milestone, milestone_from_snapshot

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class MilestoneService:
    """Service class for milestone operations."""

    @staticmethod
    def get_milestone(db: Client, milestone_id: str) -> Milestone:
        """Fetch a milestone or raise NotFoundError."""
        snapshot = db.collection(MILESTONES_COLLECTION).document(milestone_id).get()
        return milestone_from_snapshot(snapshot)

    @staticmethod
    def create_milestone(
        db: Client,
        team_id: str,
        title: str,
        due_date: Any,
        created_by: str,
        description: str = "",
    ) -> Milestone:
        """Add a planned milestone to a team."""
        title = (title or "").strip()
        if not title:
            raise ValidationError("Milestone title is required.")
        data: dict[str, Any] = {
            "teamId": team_id,
            "title": title,
            "description": (description or "").strip(),
            "dueDate": to_storage_instant(due_date),
            "status": MILESTONE_STATUSES[0],
            "createdBy": created_by,
            "createdAt": utcnow(),
        }
        ref = db.collection(MILESTONES_COLLECTION).document()
        ref.set(data)
        return {"id": ref.id, **data}  # type: ignore[typeddict-item]

    @staticmethod
    def list_milestones(db: Client, team_id: str) -> list[Milestone]:
        """Fetch a team's milestones ordered by due date."""
        query = db.collection(MILESTONES_COLLECTION).where(
            filter=firestore.FieldFilter("teamId", "==", team_id)
        )
        milestones = [milestone_from_snapshot(snap) for snap in query.stream()]
        return sorted(milestones, key=lambda m: m["dueDate"])

    @staticmethod
    def update_milestone_status(db: Client, milestone_id: str, status: str) -> None:
        """Move a milestone to planned, in-progress or completed."""
        if status not in MILESTONE_STATUSES:
            raise ValidationError(f"Unknown milestone status: {status!r}")
        MilestoneService.get_milestone(db, milestone_id)
        db.collection(MILESTONES_COLLECTION).document(milestone_id).update(
            {"status": status}
        )

    @staticmethod
    def delete_milestone(db: Client, milestone_id: str) -> None:
        """Delete a milestone."""
        MilestoneService.get_milestone(db, milestone_id)
        db.collection(MILESTONES_COLLECTION).document(milestone_id).delete()
