# src/services/errors.py
# Responsibility: Exception hierarchy for the search service layer.

from typing import Optional


class SearchServiceError(Exception):
    """Base class for all search service errors."""

    def __init__(self, message: str = "Search service error"):
        self.message = message
        super().__init__(self.message)


class DatastoreError(SearchServiceError):
    """
    Raised when the listing datastore cannot answer a query
    (connection failure, SQL error, timeout).
    """

    def __init__(self, message: str = "Datastore query failed", operation: Optional[str] = None):
        self.operation = operation
        if operation:
            message = f"{message} (operation: {operation})"
        super().__init__(message)
