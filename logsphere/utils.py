"""Outbound email helpers."""

import smtplib

from flask import current_app, render_template
from flask_mail import Message
from jinja2 import TemplateError

from .core.constants import SMTP_AUTH_ERROR_CODE
from .extensions import mail


class EmailError(Exception):
    """Raised when an email cannot be rendered or delivered."""


def build_email(to, subject, template, **context):
    """Render ``template`` into a message for a single recipient."""
    return Message(
        subject,
        recipients=[to],
        html=render_template(template, **context),
        sender=current_app.config["MAIL_DEFAULT_SENDER"],
    )


def send_email(to, subject, template, **context):
    """Render and send an email.

    Raises:
        EmailError: If rendering or sending the email fails.
    """
    try:
        message = build_email(to, subject, template, **context)
    except TemplateError as e:
        raise EmailError(f"Could not render {template}: {e}") from e
    try:
        mail.send(message)
    except smtplib.SMTPAuthenticationError as e:
        if e.smtp_code == SMTP_AUTH_ERROR_CODE:
            raise EmailError(
                "The mail provider requires an app password. Check "
                "MAIL_USERNAME and MAIL_PASSWORD."
            ) from e
        raise EmailError(f"SMTP authentication failed: {e}") from e
    except (smtplib.SMTPException, OSError) as e:
        raise EmailError(f"Failed to send email to {to}: {e}") from e
    current_app.logger.info(f"Sent '{subject}' to {to}")
