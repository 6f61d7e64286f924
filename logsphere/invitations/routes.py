"""Routes for the invitations blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import g, request

from logsphere.auth.decorators import login_required
from logsphere.core.forms import validate_form
from logsphere.core.responses import api_response
from logsphere.teams.services import TeamService
from logsphere.teams.utils import require_team_lead

from . import bp
from .forms import InviteForm, JoinRequestForm
from .models import invitation_to_json
from .services import InvitationService


def _require_lead_of_invitation(db: Any, invitation_id: str) -> None:
    invitation = InvitationService.get_invitation(db, invitation_id)
    require_team_lead(TeamService.get_team(db, invitation["teamId"]), g.user)


@bp.route("/team/<string:team_id>", methods=["GET"])
@login_required
def team_invitations(team_id: str) -> Any:
    """List a team's pending invitations and join requests."""
    db = firestore.client()
    require_team_lead(TeamService.get_team(db, team_id), g.user)
    invitations = InvitationService.list_pending_for_team(
        db, team_id, request.args.get("type")
    )
    return api_response([invitation_to_json(i) for i in invitations])


@bp.route("/team/<string:team_id>", methods=["POST"])
@login_required
def invite(team_id: str) -> Any:
    """Invite someone to a team by email."""
    db = firestore.client()
    require_team_lead(TeamService.get_team(db, team_id), g.user)
    form = validate_form(InviteForm())
    invitation = InvitationService.create_invitation(
        db, team_id, form.email.data, form.role.data, g.user
    )
    return api_response(invitation_to_json(invitation), "Invitation sent.", 201)


@bp.route("/mine", methods=["GET"])
@login_required
def my_invitations() -> Any:
    """List invitations addressed to the user and requests they made."""
    db = firestore.client()
    return api_response(
        {
            "invitations": [
                invitation_to_json(i)
                for i in InvitationService.list_pending_for_email(
                    db, g.user.get("email", "")
                )
            ],
            "requests": [
                invitation_to_json(i)
                for i in InvitationService.list_requests_by_user(db, g.user.uid)
            ],
        }
    )


@bp.route("/<string:invitation_id>/accept", methods=["POST"])
@login_required
def accept(invitation_id: str) -> Any:
    """Accept an invitation."""
    invitation = InvitationService.accept_invitation(
        firestore.client(), invitation_id, g.user
    )
    return api_response(invitation_to_json(invitation), "Invitation accepted.")


@bp.route("/<string:invitation_id>/decline", methods=["POST"])
@login_required
def decline(invitation_id: str) -> Any:
    """Decline an invitation."""
    InvitationService.decline_invitation(firestore.client(), invitation_id, g.user)
    return api_response(message="Invitation declined.")


@bp.route("/<string:invitation_id>", methods=["DELETE"])
@login_required
def cancel(invitation_id: str) -> Any:
    """Withdraw an invitation."""
    db = firestore.client()
    _require_lead_of_invitation(db, invitation_id)
    InvitationService.cancel_invitation(db, invitation_id)
    return api_response(message="Invitation cancelled.")


@bp.route("/request", methods=["POST"])
@login_required
def request_to_join() -> Any:
    """Ask to join a team using its code."""
    form = validate_form(JoinRequestForm())
    join_request = InvitationService.request_to_join(
        firestore.client(), form.code.data, g.user
    )
    return api_response(invitation_to_json(join_request), "Request sent.", 201)


@bp.route("/<string:invitation_id>/approve", methods=["POST"])
@login_required
def approve(invitation_id: str) -> Any:
    """Approve a join request."""
    db = firestore.client()
    _require_lead_of_invitation(db, invitation_id)
    join_request = InvitationService.approve_join_request(db, invitation_id)
    return api_response(invitation_to_json(join_request), "Request approved.")


@bp.route("/<string:invitation_id>/reject", methods=["POST"])
@login_required
def reject(invitation_id: str) -> Any:
    """Reject a join request."""
    db = firestore.client()
    _require_lead_of_invitation(db, invitation_id)
    InvitationService.reject_join_request(db, invitation_id)
    return api_response(message="Request rejected.")
