"""The user blueprint."""

from flask import Blueprint

from .models import User, UserSession

bp = Blueprint("user", __name__, url_prefix="/user")

from . import routes  # noqa: E402

__all__ = ["User", "UserSession", "routes"]
