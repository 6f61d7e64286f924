"""Decorators for the auth blueprint."""

from functools import wraps

from flask import g

from logsphere.errors import AuthenticationError, PermissionDeniedError


def login_required(f=None, roles=None):
    """Reject the request unless a user is signed in.

    Usage:
    @login_required
    def protected_view():
        ...

    @login_required(roles=("team_lead", "admin"))
    def lead_view():
        ...
    """

    def decorator(func):
        @wraps(func)
        def decorated_function(*args, **kwargs):
            if g.get("user") is None:
                raise AuthenticationError()
            if roles and g.user.role not in roles:
                raise PermissionDeniedError(
                    "You are not authorized to perform this action."
                )
            return func(*args, **kwargs)

        return decorated_function

    if f:
        return decorator(f)
    return decorator
