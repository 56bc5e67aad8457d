"""Custom exceptions for the bikedata library.

This module defines custom exception classes that provide cleaner error messages
in Jupyter/IPython environments while maintaining standard Python exception behavior
in scripts.
"""

from typing import Optional


class BikeDataError(Exception):
    """Base exception class for bikedata library errors.

    In Jupyter notebooks the message is displayed with an ❌ prefix instead of a
    verbose traceback string. In standard Python scripts it behaves like a
    normal exception.

    Examples:
        In a Jupyter notebook:
            >>> raise BikeDataError("Invalid API key")
            ❌ Invalid API key

        In a Python script:
            >>> raise BikeDataError("Invalid API key")
            Traceback (most recent call last):
              ...
            BikeDataError: Invalid API key
    """

    def __str__(self) -> str:
        """Return a clean, formatted error message.

        Returns:
            Formatted error message string.
        """
        try:
            get_ipython  # type: ignore  # noqa: F821
            return f"\n❌ {super().__str__()}\n"
        except NameError:
            return super().__str__()


class QueryError(BikeDataError):
    """The collisions endpoint returned a non-success status or a malformed body.

    Attributes:
        message: Server-supplied error message when available, else a generic one.
        status: HTTP status code, or None when no response was received.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class UnknownCategoryError(BikeDataError):
    """A feature's category has no entry in the configured icon mapping."""

    def __init__(self, category):
        super().__init__(f"No icon configured for category {category!r}")
        self.category = category
