"""
Domain errors raised by the watching-state core and its collaborators.

The API layer maps these to HTTP responses in app.main; anything else
(SQLAlchemy errors included) is an infrastructure failure and becomes a 500.
"""


class SeriesTrackerError(Exception):
    """Base class for all domain errors"""


class InvalidArgumentError(SeriesTrackerError, ValueError):
    """A user, series or episode id does not refer to an existing row, or a value is out of range."""


class UnknownStatusError(SeriesTrackerError):
    """A status value matches none of the known watching states."""

    def __init__(self, status):
        self.status = status
        super().__init__(f"Unknown watching status: {status!r}")


class ReviewNotAllowedError(SeriesTrackerError):
    """Reviews may only be written once the series is Finished."""

    def __init__(self, current_status):
        self.current_status = current_status
        label = getattr(current_status, "value", current_status)
        super().__init__(
            "Review creation is not allowed. Series must be in Finished state, "
            f"but current state is {label}"
        )
