"""
Error taxonomy for the dashboard core.

Every error is recoverable: callers report it and the operator retries.
"""
from typing import Any, Optional, Tuple


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class TransportError(DashboardError):
    """
    A webhook actor or the store could not be reached, or answered with a
    non-success status.

    Attributes:
        status_code (int): HTTP status code, if a response was received
        body (str): Response body text, if any
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class StoreReadError(DashboardError):
    """Loading a collection from the store failed."""


class ValidationError(DashboardError):
    """A command precondition was not met; nothing was dispatched."""


class LockContention(DashboardError):
    """Another command for the same entity is still in flight."""

    def __init__(self, key: Tuple[str, Any]):
        collection, entity_id = key
        super().__init__(f"{collection} {entity_id} already has an operation in flight")
        self.key = key


class NotFoundError(DashboardError):
    """The entity is not part of the current snapshot."""
