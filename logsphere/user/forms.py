"""Forms for the user blueprint."""

from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired, Length


class UpdateProfileForm(FlaskForm):
    """Form for updating the signed-in user's profile."""

    name = StringField("Name", validators=[DataRequired(), Length(max=100)])
