"""Routes for the teams blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import g

from logsphere.auth.decorators import login_required
from logsphere.core.constants import ROLE_ADMIN, ROLE_TEAM_LEAD
from logsphere.core.forms import validate_form
from logsphere.core.responses import api_response
from logsphere.logs.analytics import team_log_summary
from logsphere.logs.repository import LogRepository
from logsphere.user.models import user_to_json

from . import bp
from .forms import JoinTeamForm, RemoveMemberForm, TeamNameForm
from .services import TeamService
from .utils import (
    require_team_access,
    require_team_lead,
    roster_role_of,
    team_to_json,
)


@bp.route("/", methods=["GET"])
@login_required
def list_teams() -> Any:
    """List the teams visible to the signed-in user."""
    db = firestore.client()
    if g.user.has_global_view:
        teams = TeamService.list_teams(db)
    else:
        teams = TeamService.list_teams_for_user(db, g.user.team_ids)
    return api_response([team_to_json(team, g.user) for team in teams])


@bp.route("/", methods=["POST"])
@login_required(roles=(ROLE_TEAM_LEAD, ROLE_ADMIN))
def create_team() -> Any:
    """Create a team led by the signed-in user."""
    form = validate_form(TeamNameForm())
    team = TeamService.create_team(firestore.client(), form.name.data, g.user.uid)
    return api_response(team_to_json(team, g.user), "Team created.", 201)


@bp.route("/join", methods=["POST"])
@login_required
def join_team() -> Any:
    """Join a team with its referral or guide code."""
    form = validate_form(JoinTeamForm())
    membership = TeamService.join_team_by_code(
        firestore.client(), form.code.data, g.user.uid
    )
    return api_response(membership, "Joined team.")


@bp.route("/<string:team_id>", methods=["GET"])
@login_required
def view_team(team_id: str) -> Any:
    """Show a team with its roster."""
    require_team_access(team_id, g.user)
    roster = TeamService.get_team_roster(firestore.client(), team_id)
    leader = roster["leader"]
    return api_response(
        {
            "team": team_to_json(roster["team"], g.user),
            "leader": user_to_json(leader) if leader else None,
            "members": [user_to_json(u) for u in roster["members"]],
            "guides": [user_to_json(u) for u in roster["guides"]],
        }
    )


@bp.route("/<string:team_id>", methods=["PATCH"])
@login_required
def rename_team(team_id: str) -> Any:
    """Rename a team."""
    db = firestore.client()
    require_team_lead(TeamService.get_team(db, team_id), g.user)
    form = validate_form(TeamNameForm())
    TeamService.update_team_details(db, team_id, form.name.data)
    return api_response(message="Team updated.")


@bp.route("/<string:team_id>", methods=["DELETE"])
@login_required
def delete_team(team_id: str) -> Any:
    """Delete a team and everything that belongs to it."""
    db = firestore.client()
    require_team_lead(TeamService.get_team(db, team_id), g.user)
    counts = TeamService.delete_team(db, team_id)
    return api_response(counts, "Team deleted.")


@bp.route("/<string:team_id>/members/remove", methods=["POST"])
@login_required
def remove_member(team_id: str) -> Any:
    """Remove a member or guide from a team."""
    db = firestore.client()
    require_team_lead(TeamService.get_team(db, team_id), g.user)
    form = validate_form(RemoveMemberForm())
    TeamService.remove_team_member(db, team_id, form.user_id.data, form.role.data)
    return api_response(message="Member removed.")


@bp.route("/<string:team_id>/leave", methods=["POST"])
@login_required
def leave_team(team_id: str) -> Any:
    """Leave a team the signed-in user is on."""
    db = firestore.client()
    role = roster_role_of(TeamService.get_team(db, team_id), g.user.uid)
    if role is None:
        return api_response(message="You are not on this team.")
    TeamService.remove_team_member(db, team_id, g.user.uid, role)
    return api_response(message="You left the team.")


@bp.route("/<string:team_id>/analytics", methods=["GET"])
@login_required
def team_analytics(team_id: str) -> Any:
    """Summarize a team's logs."""
    require_team_access(team_id, g.user)
    db = firestore.client()
    TeamService.get_team(db, team_id)
    logs = LogRepository.list_logs_for_team(db, team_id)
    return api_response(team_log_summary(logs))
