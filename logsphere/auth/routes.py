"""Routes for the auth blueprint."""

from typing import Any

from firebase_admin import auth, firestore
from flask import current_app, request, session
from flask_wtf.csrf import generate_csrf

from logsphere.core.constants import ROLE_TEAM_LEAD
from logsphere.core.forms import validate_form
from logsphere.core.responses import api_error, api_response
from logsphere.errors import (
    DuplicateResourceError,
    InvalidCodeError,
    ValidationError,
)
from logsphere.extensions import csrf
from logsphere.teams.services import TeamService
from logsphere.user.models import normalize_role
from logsphere.user.services import UserService

from . import bp
from .forms import RegisterForm


@bp.route("/csrf-token", methods=["GET"])
def csrf_token() -> Any:
    """Hand the client a CSRF token to send back in the X-CSRFToken header."""
    return api_response({"csrfToken": generate_csrf()})


@bp.route("/register", methods=["POST"])
def register() -> Any:
    """Create a Firebase account and its LogSphere profile.

    Team leads may name a team to create; members and guides may give a
    join code.
    """
    form = validate_form(RegisterForm())
    role = normalize_role(form.role.data)
    if role == ROLE_TEAM_LEAD and not form.team_name.data:
        raise ValidationError("Team leads must name their team.")

    db = firestore.client()
    # Resolve the join code before any account exists.
    if role != ROLE_TEAM_LEAD and form.code.data:
        if TeamService.get_team_by_code(db, form.code.data) is None:
            raise InvalidCodeError()

    try:
        user_record = auth.create_user(
            email=form.email.data,
            password=form.password.data,
            display_name=form.name.data,
            email_verified=False,
        )
    except auth.EmailAlreadyExistsError:
        raise DuplicateResourceError("Email address is already registered.") from None

    user = UserService.create_user_profile(
        db, user_record.uid, form.name.data, form.email.data, role
    )
    data: dict[str, Any] = {"user": {"id": user["id"], "role": role}}

    if role == ROLE_TEAM_LEAD:
        team = TeamService.create_team(db, form.team_name.data, user_record.uid)
        data["team"] = {
            "id": team["id"],
            "name": team["name"],
            "referralCode": team["referralCode"],
            "guideCode": team["guideCode"],
        }
    elif form.code.data:
        data["membership"] = TeamService.join_team_by_code(
            db, form.code.data, user_record.uid
        )

    current_app.logger.info(f"Registered {user_record.uid} as {role}")
    return api_response(data, "Registration successful.", 201)


@bp.route("/session_login", methods=["POST"])
@csrf.exempt
def session_login() -> Any:
    """
    This endpoint is called from the client-side after a successful Firebase login.
    It receives the ID token, verifies it, and creates a server-side session.
    """
    id_token = (request.get_json(silent=True) or {}).get("idToken")
    if not id_token:
        return api_error("Missing idToken.", 400)
    try:
        decoded_token = auth.verify_id_token(id_token)
    except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, ValueError) as e:
        current_app.logger.warning(f"Rejected session login: {e}")
        return api_error("Invalid token.", 401)

    uid = decoded_token["uid"]
    user = UserService.get_user_by_id(firestore.client(), uid)
    if user is None:
        return api_error("User not found in Firestore.", 404)

    session.clear()
    session["user_id"] = uid
    return api_response({"id": uid, "role": user["role"]}, "Signed in.")


@bp.route("/logout", methods=["POST"])
def logout() -> Any:
    """
    The actual logout is handled by the Firebase client-side SDK.
    This route clears the server-side session.
    """
    session.clear()
    return api_response(message="You have been logged out.")
