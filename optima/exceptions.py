"""
Errors raised by the scheduling engine.
The HTTP layer maps each class to a status code in optima.main.
"""


class SchedulingError(Exception):
    """Base class for every engine error."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Malformed input; nothing was changed."""


class NotFound(SchedulingError):
    """The referenced project id is not in the store."""


class ConcurrencyConflict(SchedulingError):
    """The store changed underneath a commit; the caller may retry."""


class PersistenceFailure(SchedulingError):
    """The store could not apply a commit. Nothing was applied."""
