class TrackerError(Exception):
    """Base class for errors surfaced to API clients."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TrackerError):
    """Client input is missing or malformed."""


class DuplicateError(TrackerError):
    """A unique value already exists."""


class NotFoundError(TrackerError):
    """The requested record does not exist."""


class OwnerMissingError(TrackerError):
    """An exercise references a user that does not exist."""


class StorageError(TrackerError):
    """The database failed to execute a statement."""
