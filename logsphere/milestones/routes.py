"""Routes for the milestones blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import g

from logsphere.auth.decorators import login_required
from logsphere.core.forms import validate_form
from logsphere.core.responses import api_response
from logsphere.teams.services import TeamService
from logsphere.teams.utils import require_team_access, require_team_lead

from . import bp
from .forms import MilestoneForm, MilestoneStatusForm
from .models import milestone_to_json
from .services import MilestoneService


@bp.route("/team/<string:team_id>", methods=["GET"])
@login_required
def list_milestones(team_id: str) -> Any:
    """List a team's milestones by due date."""
    require_team_access(team_id, g.user)
    milestones = MilestoneService.list_milestones(firestore.client(), team_id)
    return api_response([milestone_to_json(m) for m in milestones])


@bp.route("/team/<string:team_id>", methods=["POST"])
@login_required
def create_milestone(team_id: str) -> Any:
    """Add a milestone to a team."""
    db = firestore.client()
    require_team_lead(TeamService.get_team(db, team_id), g.user)
    form = validate_form(MilestoneForm())
    milestone = MilestoneService.create_milestone(
        db,
        team_id,
        form.title.data,
        form.due_date.data,
        g.user.uid,
        description=form.description.data or "",
    )
    return api_response(milestone_to_json(milestone), "Milestone added.", 201)


@bp.route("/<string:milestone_id>", methods=["PATCH"])
@login_required
def update_status(milestone_id: str) -> Any:
    """Change a milestone's status."""
    db = firestore.client()
    milestone = MilestoneService.get_milestone(db, milestone_id)
    require_team_access(milestone["teamId"], g.user)
    form = validate_form(MilestoneStatusForm())
    MilestoneService.update_milestone_status(db, milestone_id, form.status.data)
    return api_response(message="Milestone updated.")


@bp.route("/<string:milestone_id>", methods=["DELETE"])
@login_required
def delete_milestone(milestone_id: str) -> Any:
    """Delete a milestone."""
    db = firestore.client()
    milestone = MilestoneService.get_milestone(db, milestone_id)
    require_team_lead(TeamService.get_team(db, milestone["teamId"]), g.user)
    MilestoneService.delete_milestone(db, milestone_id)
    return api_response(message="Milestone deleted.")
