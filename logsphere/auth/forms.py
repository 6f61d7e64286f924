"""Forms for the auth blueprint."""

from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import AnyOf, DataRequired, Email, Length, Optional

SIGNUP_ROLES = ["member", "student", "team_lead", "guide"]


class RegisterForm(FlaskForm):
    """Form for creating an account."""

    name = StringField("Name", validators=[DataRequired(), Length(max=100)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=6)])
    role = StringField("Role", validators=[DataRequired(), AnyOf(SIGNUP_ROLES)])
    team_name = StringField("Team Name", validators=[Optional(), Length(max=100)])
    code = StringField("Join Code", validators=[Optional()])
