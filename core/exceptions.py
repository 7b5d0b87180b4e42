"""Typed exceptions for rejected quote and catalog operations.

All derive from ValueError so callers that only know about ValueError
(and the API's generic ValueError handler) still treat them as client errors.
A rejected operation never leaves partial state behind.
"""

from typing import Any


class QuoteError(ValueError):
    """Base class for recoverable quote/catalog errors."""


class DependencyViolationError(QuoteError):
    """
    Adding or removing a service (or day) would orphan a dependency.

    Carries the full DependencyCheck so every conflict can be shown at once.
    """

    def __init__(self, check: Any):  # DependencyCheck, Any to avoid circular import
        self.check = check
        super().__init__(check.reason)


class InvalidMoveError(QuoteError):
    """A drag/drop move targets an invalid row or would break a dependency."""

    def __init__(self, message: str, check: Any = None):
        self.check = check
        super().__init__(message)


class DateOrderError(QuoteError):
    """A day date would break the strictly increasing day order."""


class ServiceInUseError(QuoteError):
    """A catalog service cannot be deleted while other services depend on it."""

    def __init__(self, service_name: str, dependent_names: list[str]):
        self.dependent_names = dependent_names
        super().__init__(
            f'Cannot delete "{service_name}". The following services depend on it: '
            f"{', '.join(dependent_names)}. Please remove the dependencies first."
        )


class QuoteNameConflictError(QuoteError):
    """A saved quote with this name already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Quote name "{name}" already exists')
