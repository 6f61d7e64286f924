"""Flask extensions shared by the blueprints, bound in ``create_app``."""

from flask_mail import Mail
from flask_wtf.csrf import CSRFProtect

# Invitation emails.
mail = Mail()

# JSON clients echo the token from /auth/csrf-token in the X-CSRFToken header.
csrf = CSRFProtect()
