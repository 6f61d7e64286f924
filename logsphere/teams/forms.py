"""Forms for the teams blueprint."""

from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import AnyOf, DataRequired, Length


class TeamNameForm(FlaskForm):
    """Form for creating or renaming a team."""

    name = StringField("Team Name", validators=[DataRequired(), Length(max=100)])


class JoinTeamForm(FlaskForm):
    """Form for joining a team with a referral or guide code."""

    code = StringField("Code", validators=[DataRequired(), Length(max=40)])


class RemoveMemberForm(FlaskForm):
    """Form for removing someone from a team roster."""

    user_id = StringField("User", validators=[DataRequired()])
    role = StringField("Role", validators=[DataRequired(), AnyOf(["member", "guide"])])
