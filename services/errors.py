from __future__ import annotations


class TrackerError(Exception):
    """Base class for every failure surfaced to the user."""


class ValidationError(TrackerError, ValueError):
    """Input rejected before any network call."""


class RemoteOperationError(TrackerError):
    """The remote store reported a failure; the local change was rolled back."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation


class PreconditionError(TrackerError):
    pass


class MutationInProgressError(PreconditionError):
    def __init__(self, record_id: str) -> None:
        super().__init__(f"Record {record_id} is still being saved. Try again in a moment.")
        self.record_id = record_id


SIGN_IN_REQUIRED = "Please sign in first."
