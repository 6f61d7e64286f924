"""Approval pipeline for weekly logs.

A log moves draft -> pending-lead -> pending-guide -> approved ->
final-approved. Reviewers at each stage can send it to needs-revision with a
comment; the author's resubmission goes back to the stage that asked for the
revision. Admins may force any status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from firebase_admin import firestore
from flask import current_app

from logsphere.core.constants import (
    LOG_STATUS_LABELS,
    LOG_STATUSES,
    LOGS_COLLECTION,
    NOTIFICATIONS_COLLECTION,
    ROLE_ADMIN,
    ROLE_COORDINATOR,
    ROLE_GUIDE,
    ROLE_MEMBER,
    ROLE_TEAM_LEAD,
    STATUS_APPROVED,
    STATUS_DRAFT,
    STATUS_FINAL_APPROVED,
    STATUS_NEEDS_REVISION,
    STATUS_PENDING_GUIDE,
    STATUS_PENDING_LEAD,
)
from logsphere.dates import utcnow
from logsphere.errors import IllegalTransitionError, ValidationError
from logsphere.notifications.services import build_notification

from .models import COMMENT_KIND_NOTE, COMMENT_KIND_REVISION, Log, log_from_snapshot
from .repository import LogRepository, new_comment

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction

    from logsphere.user.models import UserSession

AUTHOR_ROLES = (ROLE_MEMBER, ROLE_TEAM_LEAD)
EDITABLE_STATUSES = (STATUS_DRAFT, STATUS_NEEDS_REVISION)

# (from, to) pairs each reviewer role may apply to any log it can see.
REVIEWER_TRANSITIONS: dict[str, frozenset[tuple[str, str]]] = {
    ROLE_TEAM_LEAD: frozenset(
        {
            (STATUS_PENDING_LEAD, STATUS_PENDING_GUIDE),
            (STATUS_PENDING_LEAD, STATUS_NEEDS_REVISION),
        }
    ),
    ROLE_GUIDE: frozenset(
        {
            (STATUS_PENDING_GUIDE, STATUS_APPROVED),
            (STATUS_PENDING_GUIDE, STATUS_NEEDS_REVISION),
        }
    ),
    ROLE_COORDINATOR: frozenset(
        {
            (STATUS_APPROVED, STATUS_FINAL_APPROVED),
            (STATUS_APPROVED, STATUS_NEEDS_REVISION),
        }
    ),
}

# Revision requests from these roles send the resubmission back to the guide.
GUIDE_STAGE_ROLES = (ROLE_GUIDE, ROLE_COORDINATOR)


def resubmission_target(log: Log) -> str:
    """Return where an author's resubmission of a revised log goes."""
    for comment in reversed(log.get("comments", [])):
        if comment["kind"] == COMMENT_KIND_REVISION:
            if comment["role"] in GUIDE_STAGE_ROLES:
                return STATUS_PENDING_GUIDE
            return STATUS_PENDING_LEAD
    return STATUS_PENDING_LEAD


def is_author(log: Log, actor: UserSession) -> bool:
    """Return True if the actor wrote the log and may act as its author."""
    return actor.uid == log["createdBy"] and actor.role in AUTHOR_ROLES


def _author_targets(log: Log) -> set[str]:
    if log["status"] == STATUS_DRAFT:
        return {STATUS_PENDING_LEAD}
    if log["status"] == STATUS_NEEDS_REVISION:
        return {STATUS_PENDING_LEAD, resubmission_target(log)}
    return set()


def allowed_targets(log: Log, actor: UserSession) -> list[str]:
    """List the statuses ``actor`` may move ``log`` to."""
    if actor.role == ROLE_ADMIN:
        return [status for status in LOG_STATUSES if status != log["status"]]

    targets = {
        to
        for frm, to in REVIEWER_TRANSITIONS.get(actor.role, frozenset())
        if frm == log["status"]
    }
    if is_author(log, actor):
        targets |= _author_targets(log)
    return [status for status in LOG_STATUSES if status in targets]


def can_transition(log: Log, actor: UserSession, target: str) -> bool:
    """Return True if the transition is permitted."""
    if actor.role == ROLE_ADMIN:
        return True
    return target in allowed_targets(log, actor)


def can_edit(log: Log, actor: UserSession) -> bool:
    """Authors edit their own drafts and revisions; admins edit anything."""
    if actor.role == ROLE_ADMIN:
        return True
    return actor.uid == log["createdBy"] and log["status"] in EDITABLE_STATUSES


def transition(
    db: Client,
    log_id: str,
    actor: UserSession,
    target: str,
    comment_text: str | None = None,
) -> Log:
    """Move a log to ``target`` on behalf of ``actor``.

    Entering needs-revision appends the reviewer's comment and notifies the
    author in the same transaction as the status change.
    """
    if target not in LOG_STATUSES:
        raise ValidationError(f"Unknown log status: {target!r}")
    comment_text = (comment_text or "").strip()
    if target == STATUS_NEEDS_REVISION and not comment_text:
        raise ValidationError("A comment is required when requesting a revision.")

    log_ref = db.collection(LOGS_COLLECTION).document(log_id)
    notification_ref = db.collection(NOTIFICATIONS_COLLECTION).document()

    @firestore.transactional
    def transition_in_transaction(
        transaction: Transaction, log_ref: DocumentReference
    ) -> str:
        log = log_from_snapshot(log_ref.get(transaction=transaction))
        if not can_transition(log, actor, target):
            raise IllegalTransitionError(log["status"], target, actor.role)

        now = utcnow()
        updates = {"status": target, "updatedAt": now, "updatedBy": actor.uid}
        if target == STATUS_FINAL_APPROVED:
            updates["finalApproval"] = {"by": actor.uid, "timestamp": now}

        if target == STATUS_NEEDS_REVISION:
            comment = new_comment(actor, comment_text, COMMENT_KIND_REVISION)
            updates["comments"] = [*log["comments"], comment]
            transaction.set(
                notification_ref,
                build_notification(
                    user_id=log["createdBy"],
                    title="Revision requested",
                    message=(
                        f"Your week {log['weekNumber']} log needs revision: "
                        f"{comment_text}"
                    ),
                    log_id=log["id"],
                ),
            )
        elif comment_text:
            updates["comments"] = [
                *log["comments"],
                new_comment(actor, comment_text, COMMENT_KIND_NOTE),
            ]

        transaction.update(log_ref, updates)
        return log["status"]

    previous = transition_in_transaction(db.transaction(), log_ref)
    current_app.logger.info(
        f"Log {log_id} moved from {previous} to {target} by {actor.uid} "
        f"({actor.role})"
    )
    return LogRepository.get_log(db, log_id)


def resubmit(db: Client, log_id: str, actor: UserSession) -> Log:
    """Submit a draft, or send a revised log back to the reviewer who asked."""
    log = LogRepository.get_log(db, log_id)
    if log["status"] == STATUS_NEEDS_REVISION:
        target = resubmission_target(log)
    else:
        target = STATUS_PENDING_LEAD
    return transition(db, log_id, actor, target)


def status_label(status: str) -> str:
    """Return the human-readable label for a status."""
    return LOG_STATUS_LABELS.get(status, status)
