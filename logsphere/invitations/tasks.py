"""Background tasks for invitations."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from logsphere.core.constants import INVITATIONS_COLLECTION
from logsphere.utils import EmailError, send_email

if TYPE_CHECKING:
    from flask import Flask
    from google.cloud.firestore_v1.client import Client


def send_invitation_email_background(
    app: Flask, db: Client, invitation_id: str, email_data: dict[str, Any]
) -> threading.Thread:
    """Send an invitation email in a background thread."""

    def task() -> None:
        """Send the email and record the outcome on the invitation."""
        with app.app_context():
            invitation_ref = db.collection(INVITATIONS_COLLECTION).document(
                invitation_id
            )
            try:
                send_email(**email_data)
                invitation_ref.update(
                    {"emailStatus": "sent", "lastError": firestore.DELETE_FIELD}
                )
            except EmailError as e:
                app.logger.error(
                    f"Invitation email for {invitation_id} failed: {e}"
                )
                invitation_ref.update({"emailStatus": "failed", "lastError": str(e)})

    thread = threading.Thread(target=task)
    thread.start()
    return thread
