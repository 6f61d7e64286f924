"""Helpers shared by the JSON form handlers."""

from __future__ import annotations

from flask_wtf import FlaskForm

from logsphere.errors import ValidationError


def validate_form(form: FlaskForm) -> FlaskForm:
    """Validate a submitted form or raise the first error it reports."""
    if form.validate_on_submit():
        return form
    for field, messages in form.errors.items():
        label = getattr(getattr(form, field, None), "label", None)
        name = label.text if label is not None else field
        raise ValidationError(f"{name}: {messages[0]}")
    raise ValidationError("Invalid submission.")
