"""Routes for the notifications blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import g

from logsphere.auth.decorators import login_required
from logsphere.core.responses import api_response

from . import bp
from .models import notification_to_json
from .services import NotificationService


@bp.route("/", methods=["GET"])
@login_required
def list_notifications() -> Any:
    """List the signed-in user's notifications, newest first."""
    notifications = NotificationService.list_notifications(
        firestore.client(), g.user.uid
    )
    return api_response(
        {
            "notifications": [notification_to_json(n) for n in notifications],
            "unread": sum(1 for n in notifications if not n["read"]),
        }
    )


@bp.route("/<string:notification_id>/read", methods=["POST"])
@login_required
def mark_read(notification_id: str) -> Any:
    """Mark one notification as read."""
    NotificationService.mark_read(firestore.client(), notification_id, g.user.uid)
    return api_response(message="Notification marked as read.")


@bp.route("/read-all", methods=["POST"])
@login_required
def mark_all_read() -> Any:
    """Mark every notification as read."""
    count = NotificationService.mark_all_read(firestore.client(), g.user.uid)
    return api_response({"updated": count}, "All notifications marked as read.")
