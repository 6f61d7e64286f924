"""Team-related utility functions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from logsphere.core.constants import ROLE_GUIDE, ROLE_MEMBER
from logsphere.dates import to_iso_string
from logsphere.errors import PermissionDeniedError

if TYPE_CHECKING:
    from logsphere.user.models import UserSession

    from .models import Team


def is_team_lead(team: Team, user: UserSession) -> bool:
    """Return True if the user leads the team or is an admin."""
    return user.is_admin or team["leaderId"] == user.uid


def require_team_lead(team: Team, user: UserSession) -> None:
    """Raise unless the user leads the team or is an admin."""
    if not is_team_lead(team, user):
        raise PermissionDeniedError("Only the team lead can do that.")


def require_team_access(team_id: str | None, user: UserSession) -> None:
    """Raise unless the user belongs to the team or sees every team."""
    if not user.can_access_team(team_id):
        raise PermissionDeniedError("You are not part of this team.")


def roster_role_of(team: Team, user_id: str) -> str | None:
    """Return the roster role a user holds on a team, if any."""
    if user_id in team["guideIds"]:
        return ROLE_GUIDE
    if user_id in team["memberIds"]:
        return ROLE_MEMBER
    return None


def team_to_json(team: Team, user: UserSession) -> dict[str, Any]:
    """Render a team, showing join codes only to its lead and staff."""
    data: dict[str, Any] = {**team, "createdAt": to_iso_string(team.get("createdAt"))}
    if not (is_team_lead(team, user) or user.has_global_view):
        data.pop("referralCode", None)
        data.pop("guideCode", None)
    return data
