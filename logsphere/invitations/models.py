"""Data models for team invitations and join requests."""

from __future__ import annotations

from typing import Any

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
from logsphere.core.documents import DocumentDecoder
from logsphere.core.types import FirestoreDocument
from logsphere.dates import to_iso_string

INVITATION_STATUSES = (
    INVITATION_PENDING,
    INVITATION_ACCEPTED,
    INVITATION_DECLINED,
    INVITATION_APPROVED,
    INVITATION_REJECTED,
)
INVITATION_TYPES = (INVITATION_TYPE_INVITE, INVITATION_TYPE_REQUEST)


class Invitation(FirestoreDocument, total=False):
    """An invitation (outbound) or join request (inbound) for a team."""

    teamId: str
    teamName: str
    invitedEmail: str
    invitedBy: str
    invitedByName: str
    role: str
    type: str
    status: str
    emailStatus: str


def invitation_from_snapshot(snapshot: Any) -> Invitation:
    """Decode an invitation snapshot."""
    doc = DocumentDecoder(INVITATIONS_COLLECTION, snapshot)
    return {
        "id": doc.doc_id,
        "teamId": doc.required("teamId", str),
        "teamName": doc.optional("teamName", str, ""),
        "invitedEmail": doc.required("invitedEmail", str),
        "invitedBy": doc.required("invitedBy", str),
        "invitedByName": doc.optional("invitedByName", str, ""),
        "role": doc.choice("role", ROSTER_ROLES),
        "type": doc.optional("type", str, INVITATION_TYPE_INVITE),
        "status": doc.choice("status", INVITATION_STATUSES),
        "emailStatus": doc.optional("emailStatus", str, "pending"),
        "createdAt": doc.data.get("createdAt"),
    }


def invitation_to_json(invitation: Invitation) -> dict[str, Any]:
    """Render an invitation as JSON-safe data."""
    return {**invitation, "createdAt": to_iso_string(invitation.get("createdAt"))}
