"""Blueprint for team milestones."""

from flask import Blueprint

bp = Blueprint(
    "milestones",
    __name__,
    url_prefix="/milestones",
)

from . import routes  # noqa: E402, F401
