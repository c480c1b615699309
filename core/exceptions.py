"""
Error types raised by the FAQ search and management core.

The HTTP layer maps these to status codes (see api/main.py):
- NotFoundError -> 404
- FaqValidationError -> 422
- StorageUnavailableError -> 503
"""


class FaqServiceError(Exception):
    """Base class for all FAQ core errors."""


class NotFoundError(FaqServiceError):
    """A referenced school or FAQ does not exist."""

    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class FaqValidationError(FaqServiceError, ValueError):
    """Input rejected before any store mutation (empty text, unknown category)."""


class StorageUnavailableError(FaqServiceError, ConnectionError):
    """The record store could not be reached or the query failed."""
