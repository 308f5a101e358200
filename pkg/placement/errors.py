"""
Error taxonomy for the placement tracker.

All errors are deterministic outcomes of a single user action. They are
raised before any state is touched, so the caller can show the message
and keep going.
"""


class TrackerError(Exception):
    """Base class for every tracker error."""
    pass


class ValidationError(TrackerError):
    """Raised when a required field is missing or blank."""
    pass


class NotFoundError(TrackerError):
    """Raised when no application has the given id."""
    pass


class InvalidStageError(TrackerError):
    """Raised when a status is not one of the six pipeline stages."""
    pass


class AuthError(TrackerError):
    """Raised when email and password do not match a registered user."""
    pass


class DuplicateUserError(TrackerError):
    """Raised at signup when the email is already registered."""
    pass


class StorageError(TrackerError):
    """Raised when a stored record cannot be parsed and would be overwritten."""
    pass
