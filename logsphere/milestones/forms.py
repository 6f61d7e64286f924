"""Forms for the milestones blueprint."""

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional

from logsphere.core.constants import MILESTONE_STATUSES


class MilestoneForm(FlaskForm):
    """Form for adding a milestone."""

    title = StringField("Title", validators=[DataRequired(), Length(max=200)])
    due_date = StringField("Due Date", validators=[DataRequired()])
    description = TextAreaField("Description", validators=[Optional(), Length(max=2000)])


class MilestoneStatusForm(FlaskForm):
    """Form for moving a milestone along."""

    status = StringField(
        "Status", validators=[DataRequired(), AnyOf(MILESTONE_STATUSES)]
    )
