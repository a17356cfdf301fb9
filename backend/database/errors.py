"""
Errors raised by document store drivers.

Backend failures are not listed here: they propagate from the SDK unchanged.
Not-found is never an error (None / 0 is returned instead).
"""


class DriverError(Exception):
    """Base class for errors raised by a driver itself."""


class NotConnectedError(DriverError):
    """A data operation was invoked before connect() or after disconnect()."""

    def __init__(self, message: str = "Database not connected. Call connect() first."):
        super().__init__(message)


class UnsupportedFilterValueError(DriverError, TypeError):
    """A query value has a type the backend cannot compare for equality."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(
            f"Unsupported filter value for field '{field}': {type(value).__name__}"
        )
