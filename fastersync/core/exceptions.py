"""Synchronization primitive exception hierarchy."""


class SyncError(Exception):
    """Base exception for all fastersync errors."""

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class InvalidArgumentError(SyncError, ValueError):
    """A length or index argument is missing, not an integer, or negative."""
    pass
