"""Blueprint for team invitations and join requests."""

from flask import Blueprint

bp = Blueprint(
    "invitations",
    __name__,
    url_prefix="/invitations",
)

from . import routes  # noqa: E402, F401
