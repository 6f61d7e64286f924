"""Routes for the logs blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import g, request

from logsphere.auth.decorators import login_required
from logsphere.core.constants import ROLE_ADMIN
from logsphere.core.forms import validate_form
from logsphere.core.responses import api_response
from logsphere.errors import PermissionDeniedError, ValidationError
from logsphere.teams.services import TeamService
from logsphere.teams.utils import is_team_lead, require_team_access

from . import bp, workflow
from .forms import CommentForm, TransitionForm
from .models import Log, log_to_json
from .repository import LogRepository, parse_date_range, parse_week_number

AUTHOR_OR_ADMIN = (*workflow.AUTHOR_ROLES, ROLE_ADMIN)


def _json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Expected a JSON object.")
    return body


def _load_visible_log(db: Any, log_id: str) -> Log:
    log = LogRepository.get_log(db, log_id)
    if log["createdBy"] != g.user.uid:
        require_team_access(log["teamId"], g.user)
    return log


def _with_actions(log: Log) -> dict[str, Any]:
    data = log_to_json(log)
    data["allowedTransitions"] = workflow.allowed_targets(log, g.user)
    data["canEdit"] = workflow.can_edit(log, g.user)
    return data


@bp.route("/", methods=["GET"])
@login_required
def list_logs() -> Any:
    """List logs for one team, the user's own logs, or every visible log."""
    db = firestore.client()
    team_id = request.args.get("team_id")
    if team_id:
        require_team_access(team_id, g.user)
        logs = LogRepository.list_logs_for_team(db, team_id)
    elif request.args.get("mine"):
        logs = LogRepository.list_logs_by_user(db, g.user.uid)
    elif g.user.has_global_view:
        logs = LogRepository.list_all_logs(db)
    else:
        logs = LogRepository.list_logs_for_teams(db, g.user.team_ids)
    return api_response([_with_actions(log) for log in logs])


@bp.route("/", methods=["POST"])
@login_required(roles=AUTHOR_OR_ADMIN)
def create_log() -> Any:
    """Create a draft log."""
    candidate = _json_body()
    team_id = candidate.get("teamId") or None
    if team_id is None and not g.user.is_admin:
        raise ValidationError("A team is required.")
    if team_id is not None:
        require_team_access(team_id, g.user)
    log = LogRepository.create_log(firestore.client(), candidate, g.user)
    return api_response(_with_actions(log), "Log created.", 201)


@bp.route("/check", methods=["GET"])
@login_required
def check_log() -> Any:
    """Report whether a week number or date range is already taken."""
    db = firestore.client()
    team_id = request.args.get("team_id")
    require_team_access(team_id, g.user)
    exclude_id = request.args.get("exclude_id")
    data: dict[str, Any] = {}
    if request.args.get("week_number"):
        week = parse_week_number(request.args["week_number"])
        data["weekNumberExists"] = LogRepository.is_week_number_exists(
            db, week, team_id, exclude_id=exclude_id
        )
    if request.args.get("start_date") and request.args.get("end_date"):
        start, end = parse_date_range(
            request.args["start_date"], request.args["end_date"]
        )
        data["dateRangeOverlaps"] = LogRepository.is_date_range_overlapping(
            db, start, end, team_id, exclude_id=exclude_id
        )
    return api_response(data)


@bp.route("/<string:log_id>", methods=["GET"])
@login_required
def view_log(log_id: str) -> Any:
    """Show one log."""
    return api_response(_with_actions(_load_visible_log(firestore.client(), log_id)))


@bp.route("/<string:log_id>", methods=["PATCH"])
@login_required
def edit_log(log_id: str) -> Any:
    """Edit a draft or revised log."""
    db = firestore.client()
    log = _load_visible_log(db, log_id)
    if not workflow.can_edit(log, g.user):
        raise PermissionDeniedError("This log cannot be edited right now.")
    updated = LogRepository.update_log(db, log_id, _json_body(), g.user)
    return api_response(_with_actions(updated), "Log updated.")


@bp.route("/<string:log_id>", methods=["DELETE"])
@login_required
def delete_log(log_id: str) -> Any:
    """Delete a log. Authors may delete drafts; team leads any team log."""
    db = firestore.client()
    log = _load_visible_log(db, log_id)
    own_draft = (
        log["createdBy"] == g.user.uid and log["status"] in workflow.EDITABLE_STATUSES
    )
    if not (own_draft or g.user.is_admin):
        if not log["teamId"] or not is_team_lead(
            TeamService.get_team(db, log["teamId"]), g.user
        ):
            raise PermissionDeniedError("You cannot delete this log.")
    LogRepository.delete_log(db, log_id)
    return api_response(message="Log deleted.")


@bp.route("/<string:log_id>/transition", methods=["POST"])
@login_required
def transition_log(log_id: str) -> Any:
    """Move a log through the approval pipeline."""
    db = firestore.client()
    _load_visible_log(db, log_id)
    form = validate_form(TransitionForm())
    log = workflow.transition(db, log_id, g.user, form.status.data, form.comment.data)
    return api_response(
        _with_actions(log),
        f"Log moved to {workflow.status_label(log['status'])}.",
    )


@bp.route("/<string:log_id>/resubmit", methods=["POST"])
@login_required
def resubmit_log(log_id: str) -> Any:
    """Submit a draft, or return a revised log to its reviewer."""
    db = firestore.client()
    _load_visible_log(db, log_id)
    log = workflow.resubmit(db, log_id, g.user)
    return api_response(
        _with_actions(log),
        f"Log moved to {workflow.status_label(log['status'])}.",
    )


@bp.route("/<string:log_id>/transitions", methods=["GET"])
@login_required
def log_transitions(log_id: str) -> Any:
    """List the statuses the signed-in user may move the log to."""
    log = _load_visible_log(firestore.client(), log_id)
    return api_response(
        [
            {"status": status, "label": workflow.status_label(status)}
            for status in workflow.allowed_targets(log, g.user)
        ]
    )


@bp.route("/<string:log_id>/comments", methods=["POST"])
@login_required
def comment_on_log(log_id: str) -> Any:
    """Comment on a log without changing its status."""
    db = firestore.client()
    _load_visible_log(db, log_id)
    form = validate_form(CommentForm())
    log = LogRepository.add_comment(db, log_id, g.user, form.text.data)
    return api_response(_with_actions(log), "Comment added.", 201)
