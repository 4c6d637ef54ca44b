"""Exception hierarchy for reflib.

Usage errors (``UnsupportedFormat``, ``InvalidArguments``) are raised
synchronously before any I/O. Faults reported by a driver are wrapped in
``DriverError`` and delivered through the caller's chosen convention.
"""

__all__ = [
    "ReflibError",
    "UnsupportedFormat",
    "InvalidArguments",
    "DriverError",
    "InternalInvariantViolation",
]


class ReflibError(Exception):
    """Base class for all reflib errors."""


class UnsupportedFormat(ReflibError, ValueError):
    """Raised when a format id or file extension has no registered format."""

    def __init__(
        self,
        message: str,
        format_id: str | None = None,
        path: str | None = None,
    ) -> None:
        """Initialize unsupported format error.

        Parameters
        ----------
        message : str
            Error message.
        format_id : str | None, optional
            Format id that failed to resolve.
        path : str | None, optional
            File path whose extension failed to resolve.
        """
        super().__init__(message)
        self.format_id = format_id
        self.path = path


class InvalidArguments(ReflibError, TypeError):
    """Raised when settings are malformed or a call has an unrecognized shape."""


class DriverError(ReflibError):
    """Raised (or delivered) when a format driver fails while streaming."""

    def __init__(self, message: str, format_id: str | None = None) -> None:
        """Initialize driver error.

        Parameters
        ----------
        message : str
            Error message.
        format_id : str | None, optional
            Id of the format whose driver failed.
        """
        super().__init__(message)
        self.format_id = format_id


class InternalInvariantViolation(ReflibError, RuntimeError):
    """Raised when reflib detects a bug in itself. Never recoverable."""
