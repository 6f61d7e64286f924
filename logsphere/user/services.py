"""Service layer for user profiles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from logsphere.core.constants import USERS_COLLECTION
from logsphere.errors import ValidationError

from .models import User, normalize_role, user_from_snapshot

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class UserService:
    """Service class for user-related operations."""

    @staticmethod
    def get_user_by_id(db: Client, user_id: str) -> User | None:
        """Fetch a user by ID, or None if the profile does not exist."""
        snapshot = db.collection(USERS_COLLECTION).document(user_id).get()
        if not snapshot.exists:
            return None
        return user_from_snapshot(snapshot)

    @staticmethod
    def get_users_by_ids(db: Client, user_ids: list[str]) -> list[User]:
        """Fetch several users in one round trip, skipping missing ones."""
        if not user_ids:
            return []
        refs = [db.collection(USERS_COLLECTION).document(uid) for uid in user_ids]
        users = [user_from_snapshot(snap) for snap in db.get_all(refs) if snap.exists]
        order = {uid: i for i, uid in enumerate(user_ids)}
        return sorted(users, key=lambda u: order.get(u["id"], len(order)))

    @staticmethod
    def list_users(db: Client) -> list[User]:
        """Fetch every user profile."""
        return [
            user_from_snapshot(snap)
            for snap in db.collection(USERS_COLLECTION).stream()
        ]

    @staticmethod
    def create_user_profile(
        db: Client, user_id: str, name: str, email: str, role: str
    ) -> User:
        """Create the Firestore profile for a freshly registered account."""
        data: dict[str, Any] = {
            "name": name,
            "email": email.lower(),
            "role": normalize_role(role),
            "teamIds": [],
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        db.collection(USERS_COLLECTION).document(user_id).set(data)
        return {"id": user_id, **data}  # type: ignore[typeddict-item]

    @staticmethod
    def update_profile(db: Client, user_id: str, name: str) -> None:
        """Update the editable profile fields."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required.")
        db.collection(USERS_COLLECTION).document(user_id).update({"name": name})
