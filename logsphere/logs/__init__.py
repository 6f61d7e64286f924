"""Blueprint for weekly logs."""

from flask import Blueprint

bp = Blueprint(
    "logs",
    __name__,
    url_prefix="/logs",
)

from . import routes  # noqa: E402, F401
