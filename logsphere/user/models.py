"""Data models for the user blueprint."""

from __future__ import annotations

from collections import UserDict
from typing import Any

from flask_login import UserMixin

from logsphere.core.constants import (
    ROLE_ADMIN,
    ROLE_ALIASES,
    ROLE_COORDINATOR,
    ROLE_MEMBER,
    ROLES,
    USERS_COLLECTION,
)
from logsphere.core.documents import DocumentDecoder
from logsphere.core.types import FirestoreDocument
from logsphere.errors import ValidationError


class User(FirestoreDocument, total=False):
    """A user document in Firestore."""

    name: str
    email: str
    role: str
    teamIds: list[str]
    username: str
    profileIncomplete: bool


def normalize_role(role: Any) -> str:
    """Map a role name, including legacy aliases, onto a known role."""
    if not isinstance(role, str):
        raise ValidationError(f"Unknown role: {role!r}")
    role = ROLE_ALIASES.get(role.strip().lower(), role.strip().lower())
    if role not in ROLES:
        raise ValidationError(f"Unknown role: {role!r}")
    return role


def user_from_snapshot(snapshot: Any) -> User:
    """Decode a user snapshot, rejecting documents without a usable role."""
    doc = DocumentDecoder(USERS_COLLECTION, snapshot)
    raw_role = doc.optional("role", str, ROLE_MEMBER)
    try:
        role = normalize_role(raw_role)
    except ValidationError:
        raise doc.fail(f"'role' has unknown value {raw_role!r}") from None

    user: User = {
        "id": doc.doc_id,
        "name": doc.optional("name", str, ""),
        "email": doc.optional("email", str, ""),
        "role": role,
        "teamIds": doc.string_list("teamIds"),
        "createdAt": doc.data.get("createdAt"),
    }
    if "username" in doc.data:
        user["username"] = doc.optional("username", str, "")
    return user


class UserSession(UserDict, UserMixin):
    """The authenticated user for one request.

    Built from the user document in ``before_request`` and handed to the
    service layer explicitly.
    """

    def get_id(self) -> str:
        """Return the user ID."""
        return str(self.get("id", ""))

    @property
    def uid(self) -> str:
        """Return the user ID."""
        return self.get_id()

    @property
    def name(self) -> str:
        """Return the display name."""
        return str(self.get("name") or self.get("email") or "Unknown")

    @property
    def role(self) -> str:
        """Return the normalized role."""
        return normalize_role(self.get("role", ROLE_MEMBER))

    @property
    def team_ids(self) -> list[str]:
        """Return the ids of the teams the user belongs to."""
        return list(self.get("teamIds", []))

    @property
    def is_admin(self) -> bool:
        """Return True if the user is an administrator."""
        return self.role == ROLE_ADMIN

    @property
    def has_global_view(self) -> bool:
        """Coordinators and admins can see every team."""
        return self.role in (ROLE_ADMIN, ROLE_COORDINATOR)

    def can_access_team(self, team_id: str | None) -> bool:
        """Return True if the user may read or act on the team's data."""
        if self.has_global_view:
            return True
        return team_id is not None and team_id in self.team_ids


def user_to_json(user: Any) -> dict[str, Any]:
    """Render the public fields of a user profile."""
    return {
        "id": user.get("id"),
        "name": user.get("name", ""),
        "email": user.get("email", ""),
        "role": user.get("role"),
        "teamIds": list(user.get("teamIds", [])),
    }
