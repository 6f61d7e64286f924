"""Routes for the user blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import g

from logsphere.auth.decorators import login_required
from logsphere.core.forms import validate_form
from logsphere.core.responses import api_response
from logsphere.invitations.models import invitation_to_json
from logsphere.invitations.services import InvitationService
from logsphere.logs.analytics import team_log_summary
from logsphere.logs.repository import LogRepository
from logsphere.notifications.services import NotificationService
from logsphere.teams.services import TeamService
from logsphere.teams.utils import team_to_json

from . import bp
from .forms import UpdateProfileForm
from .models import user_to_json
from .services import UserService


@bp.route("/me", methods=["GET"])
@login_required
def get_profile() -> Any:
    """Return the signed-in user's profile."""
    return api_response(user_to_json(g.user))


@bp.route("/me", methods=["PATCH", "POST"])
@login_required
def update_profile() -> Any:
    """Update the signed-in user's profile."""
    form = validate_form(UpdateProfileForm())
    UserService.update_profile(firestore.client(), g.user.uid, form.name.data)
    return api_response(message="Profile updated.")


@bp.route("/dashboard", methods=["GET"])
@login_required
def dashboard() -> Any:
    """Fetch everything the dashboard shows for the signed-in user."""
    db = firestore.client()
    user = g.user

    if user.has_global_view:
        teams = TeamService.list_teams(db)
        logs = LogRepository.list_all_logs(db)
    else:
        teams = TeamService.list_teams_for_user(db, user.team_ids)
        logs = LogRepository.list_logs_for_teams(db, [t["id"] for t in teams])

    return api_response(
        {
            "user": user_to_json(user),
            "teams": [team_to_json(team, user) for team in teams],
            "summary": team_log_summary(logs),
            "my_log_count": sum(1 for log in logs if log["createdBy"] == user.uid),
            "unread_notifications": NotificationService.unread_count(db, user.uid),
            "pending_invitations": [
                invitation_to_json(i)
                for i in InvitationService.list_pending_for_email(
                    db, user.get("email", "")
                )
            ],
        }
    )
