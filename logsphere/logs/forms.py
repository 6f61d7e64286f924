"""Forms for the logs blueprint."""

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional

from logsphere.core.constants import LOG_STATUSES


class TransitionForm(FlaskForm):
    """Form for moving a log to another status."""

    status = StringField("Status", validators=[DataRequired(), AnyOf(LOG_STATUSES)])
    comment = TextAreaField("Comment", validators=[Optional(), Length(max=2000)])


class CommentForm(FlaskForm):
    """Form for commenting on a log."""

    text = TextAreaField("Comment", validators=[DataRequired(), Length(max=2000)])
