"""Service layer for team invitations and join requests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from logsphere.core.constants import (
    INVITATION_ACCEPTED,
    INVITATION_APPROVED,
    INVITATION_DECLINED,
    INVITATION_PENDING,
    INVITATION_REJECTED,
    INVITATION_TYPE_INVITE,
    INVITATION_TYPE_REQUEST,
    INVITATIONS_COLLECTION,
    ROSTER_ROLES,
)
from logsphere.errors import (
    DuplicateResourceError,
    InvalidCodeError,
    PermissionDeniedError,
    ValidationError,
)
from logsphere.notifications.services import NotificationService
from logsphere.teams.services import TeamService

from .models import Invitation, invitation_from_snapshot
from .tasks import send_invitation_email_background

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from logsphere.user.models import UserSession


def _pending_query(db: Client, **fields: str) -> Any:
    query = db.collection(INVITATIONS_COLLECTION).where(
        filter=firestore.FieldFilter("status", "==", INVITATION_PENDING)
    )
    for field, value in fields.items():
        query = query.where(filter=firestore.FieldFilter(field, "==", value))
    return query


class InvitationService:
    """Service class for invitation operations."""

    @staticmethod
    def get_invitation(db: Client, invitation_id: str) -> Invitation:
        """Fetch an invitation or raise NotFoundError."""
        snapshot = db.collection(INVITATIONS_COLLECTION).document(invitation_id).get()
        return invitation_from_snapshot(snapshot)

    @staticmethod
    def list_pending_for_team(
        db: Client, team_id: str, invitation_type: str | None = None
    ) -> list[Invitation]:
        """Fetch a team's pending invitations, optionally of one type."""
        invitations = [
            invitation_from_snapshot(snap)
            for snap in _pending_query(db, teamId=team_id).stream()
        ]
        if invitation_type:
            invitations = [i for i in invitations if i["type"] == invitation_type]
        return invitations

    @staticmethod
    def list_pending_for_email(db: Client, email: str) -> list[Invitation]:
        """Fetch the pending outbound invitations addressed to an email."""
        return [
            invitation
            for invitation in (
                invitation_from_snapshot(snap)
                for snap in _pending_query(db, invitedEmail=email.lower()).stream()
            )
            if invitation["type"] == INVITATION_TYPE_INVITE
        ]

    @staticmethod
    def list_requests_by_user(db: Client, user_id: str) -> list[Invitation]:
        """Fetch the join requests a user is still waiting on."""
        return [
            invitation
            for invitation in (
                invitation_from_snapshot(snap)
                for snap in _pending_query(db, invitedBy=user_id).stream()
            )
            if invitation["type"] == INVITATION_TYPE_REQUEST
        ]

    @staticmethod
    def _store(db: Client, data: dict[str, Any]) -> Invitation:
        ref = db.collection(INVITATIONS_COLLECTION).document()
        data = {**data, "status": INVITATION_PENDING, "createdAt": firestore.SERVER_TIMESTAMP}
        ref.set(data)
        return {"id": ref.id, **data}  # type: ignore[typeddict-item]

    @staticmethod
    def create_invitation(
        db: Client, team_id: str, email: str, role: str, inviter: UserSession
    ) -> Invitation:
        """Invite an email address to join a team, and email the invitee."""
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Email is required.")
        if role not in ROSTER_ROLES:
            raise ValidationError(f"Cannot invite someone as '{role}'.")
        team = TeamService.get_team(db, team_id)
        if list(_pending_query(db, teamId=team_id, invitedEmail=email).limit(1).stream()):
            raise DuplicateResourceError(f"{email} already has a pending invitation.")

        invitation = InvitationService._store(
            db,
            {
                "teamId": team_id,
                "teamName": team["name"],
                "invitedEmail": email,
                "invitedBy": inviter.uid,
                "invitedByName": inviter.name,
                "role": role,
                "type": INVITATION_TYPE_INVITE,
            },
        )
        send_invitation_email_background(
            current_app._get_current_object(),  # type: ignore[attr-defined]
            db,
            invitation["id"],
            {
                "to": email,
                "subject": f"You're invited to join {team['name']} on LogSphere",
                "template": "email/team_invitation.html",
                "team": team,
                "role": role,
                "inviter_name": inviter.name,
            },
        )
        current_app.logger.info(f"Invited {email} to team {team_id} as {role}")
        return invitation

    @staticmethod
    def accept_invitation(db: Client, invitation_id: str, user: UserSession) -> Invitation:
        """Join the team an invitation is for, then mark it accepted."""
        invitation = InvitationService.get_invitation(db, invitation_id)
        if invitation["status"] != INVITATION_PENDING:
            raise ValidationError("This invitation is no longer pending.")
        if invitation["invitedEmail"] != str(user.get("email", "")).lower():
            raise PermissionDeniedError("This invitation was sent to someone else.")

        TeamService.join_team_by_id(db, invitation["teamId"], user.uid, invitation["role"])
        db.collection(INVITATIONS_COLLECTION).document(invitation_id).update(
            {"status": INVITATION_ACCEPTED}
        )
        return {**invitation, "status": INVITATION_ACCEPTED}

    @staticmethod
    def decline_invitation(db: Client, invitation_id: str, user: UserSession) -> None:
        """Decline an invitation addressed to the user."""
        invitation = InvitationService.get_invitation(db, invitation_id)
        if invitation["invitedEmail"] != str(user.get("email", "")).lower():
            raise PermissionDeniedError("This invitation was sent to someone else.")
        if invitation["status"] != INVITATION_PENDING:
            raise ValidationError("This invitation is no longer pending.")
        db.collection(INVITATIONS_COLLECTION).document(invitation_id).update(
            {"status": INVITATION_DECLINED}
        )

    @staticmethod
    def cancel_invitation(db: Client, invitation_id: str) -> None:
        """Withdraw an invitation."""
        InvitationService.get_invitation(db, invitation_id)
        db.collection(INVITATIONS_COLLECTION).document(invitation_id).delete()

    @staticmethod
    def request_to_join(db: Client, code: str, user: UserSession) -> Invitation:
        """Ask a team's lead for admission using one of the team's codes."""
        match = TeamService.get_team_by_code(db, code)
        if match is None:
            raise InvalidCodeError()
        team, role = match
        if user.uid in team["memberIds"] or user.uid in team["guideIds"]:
            raise DuplicateResourceError("You are already a member of this team.")
        if team["leaderId"] == user.uid:
            raise DuplicateResourceError("You already lead this team.")

        email = str(user.get("email", "")).lower()
        if list(
            _pending_query(
                db, teamId=team["id"], invitedEmail=email, type=INVITATION_TYPE_REQUEST
            )
            .limit(1)
            .stream()
        ):
            raise DuplicateResourceError(
                "You already have a pending request for this team."
            )

        request = InvitationService._store(
            db,
            {
                "teamId": team["id"],
                "teamName": team["name"],
                "invitedEmail": email,
                "invitedBy": user.uid,
                "invitedByName": user.name,
                "role": role,
                "type": INVITATION_TYPE_REQUEST,
            },
        )
        NotificationService.create_notification(
            db,
            team["leaderId"],
            "New join request",
            f"{user.name} asked to join {team['name']} as {role}.",
        )
        return request

    @staticmethod
    def approve_join_request(db: Client, request_id: str) -> Invitation:
        """Admit the requester and clear their other pending invitations."""
        request = InvitationService.get_invitation(db, request_id)
        if request["type"] != INVITATION_TYPE_REQUEST:
            raise ValidationError("Only join requests can be approved.")
        if request["status"] != INVITATION_PENDING:
            raise ValidationError("This request is no longer pending.")

        TeamService.join_team_by_id(
            db, request["teamId"], request["invitedBy"], request["role"]
        )
        db.collection(INVITATIONS_COLLECTION).document(request_id).update(
            {"status": INVITATION_APPROVED}
        )
        for snap in _pending_query(
            db, teamId=request["teamId"], invitedEmail=request["invitedEmail"]
        ).stream():
            if snap.id != request_id:
                snap.reference.delete()

        NotificationService.create_notification(
            db,
            request["invitedBy"],
            "Join request approved",
            f"You are now part of {request['teamName']}.",
        )
        return {**request, "status": INVITATION_APPROVED}

    @staticmethod
    def reject_join_request(db: Client, request_id: str) -> None:
        """Turn down a join request."""
        request = InvitationService.get_invitation(db, request_id)
        if request["type"] != INVITATION_TYPE_REQUEST:
            raise ValidationError("Only join requests can be rejected.")
        if request["status"] != INVITATION_PENDING:
            raise ValidationError("This request is no longer pending.")
        db.collection(INVITATIONS_COLLECTION).document(request_id).update(
            {"status": INVITATION_REJECTED}
        )
