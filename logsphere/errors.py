"""Custom exception classes for the application."""


class AppError(Exception):
    """Base application error class."""

    def __init__(self, message, status_code=400):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ValidationError(AppError):
    """Raised when user input fails validation."""

    def __init__(self, message="Validation failed."):
        """Initialize the error."""
        super().__init__(message, 400)


class DuplicateResourceError(AppError):
    """Raised when trying to create a resource that already exists."""

    def __init__(self, message="Resource already exists."):
        """Initialize the error."""
        super().__init__(message, 409)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    def __init__(self, message="Resource not found."):
        """Initialize the error."""
        super().__init__(message, 404)


class PermissionDeniedError(AppError):
    """Raised when the current user may not perform an action."""

    def __init__(self, message="You do not have permission to do that."):
        """Initialize the error."""
        super().__init__(message, 403)


class DuplicateWeekError(DuplicateResourceError):
    """Raised when a team already has a log for the given week."""

    def __init__(self, week_number):
        """Initialize the error."""
        super().__init__(f"A log for week {week_number} already exists.")
        self.week_number = week_number


class OverlappingRangeError(AppError):
    """Raised when a log's date range overlaps another log of the team."""

    def __init__(self, message="Date range overlaps with an existing log."):
        """Initialize the error."""
        super().__init__(message, 409)


class ActivityOutOfRangeError(ValidationError):
    """Raised when an activity date falls outside its log's date range."""


class InvalidDateError(ValidationError):
    """Raised when a value does not parse to a real calendar date."""


class IllegalTransitionError(AppError):
    """Raised when a log status change is not permitted."""

    def __init__(self, current, target, role):
        """Initialize the error."""
        super().__init__(
            f"A {role} cannot move a log from '{current}' to '{target}'.", 409
        )
        self.current = current
        self.target = target
        self.role = role


class InvalidCodeError(NotFoundError):
    """Raised when a join code matches no team."""

    def __init__(self, message="Invalid code. Please check and try again."):
        """Initialize the error."""
        super().__init__(message)


class MalformedDocumentError(AppError):
    """Raised when a stored document does not have the expected shape."""

    def __init__(self, collection, doc_id, reason):
        """Initialize the error."""
        super().__init__(f"Malformed {collection} document {doc_id}: {reason}", 500)


class AuthenticationError(AppError):
    """Raised when a request needs a signed-in user and has none."""

    def __init__(self, message="Please sign in to continue."):
        """Initialize the error."""
        super().__init__(message, 401)
