"""
Registration exceptions.

Extend the core exception hierarchy with errors raised while admitting or
looking up entries.

Exception Hierarchy:
    ValidationError
    └── InvalidReferenceError - Category missing or insert rejected for another reason
    NotFoundError
    └── EntryNotFoundError - No entry with the given id

Database outages surface as core.exceptions.StorageUnavailableError.
"""

from core.exceptions import NotFoundError, ValidationError


class InvalidReferenceError(ValidationError):
    """
    Raised when an entry cannot be created for the requested category.

    Either the category does not exist, or the insert was rejected by a
    constraint other than the one-entry-per-participant rule. Not retryable.
    """

    default_error_code = "INVALID_REFERENCE"


class EntryNotFoundError(NotFoundError):
    """Raised when no entry exists with the requested id."""

    default_error_code = "ENTRY_NOT_FOUND"
