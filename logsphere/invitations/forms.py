"""Forms for the invitations blueprint."""

from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import AnyOf, DataRequired, Email, Length


class InviteForm(FlaskForm):
    """Form for inviting someone to a team by email."""

    email = StringField("Email", validators=[DataRequired(), Email()])
    role = StringField(
        "Role", default="member", validators=[DataRequired(), AnyOf(["member", "guide"])]
    )


class JoinRequestForm(FlaskForm):
    """Form for asking to join a team."""

    code = StringField("Code", validators=[DataRequired(), Length(max=40)])
