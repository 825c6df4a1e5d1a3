"""Project-wide custom exceptions.

Routers, the persistence adapters and the client-side store raise / catch
these rather than infrastructure errors like raw SQLAlchemy exceptions,
``OSError`` or ``httpx.HTTPError``.

Add new errors here rather than scattering small ``class XError(Exception):``
definitions across the codebase; this keeps the public error surface easy to
audit and map to HTTP responses or user-facing alerts.
"""
from __future__ import annotations


class CreatorFlowError(Exception):
    """Base class for all custom project exceptions."""


class SyncFailedError(CreatorFlowError):
    """A round trip to the backing store failed (read, write or timeout).

    ``action`` is the human readable name of what was attempted ("Save",
    "Restore", "Empty bin", ...) and ends up in the user-facing alert.
    """
    def __init__(self, action: str, reason: str | None = None):
        self.action = action
        self.reason = reason
        detail = f"{action} failed"
        if reason:
            detail += f" ({reason})"
        super().__init__(detail)


class DraftValidationError(CreatorFlowError):
    """An idea draft is not savable (blank title, missing channel or status)."""
    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems) or "draft is not savable")


class ChannelInUseError(CreatorFlowError):
    """Deleting a channel was refused because ideas still reference it."""
    def __init__(self, channel_id, references: int):
        self.channel_id = channel_id
        self.references = references
        super().__init__(f"Channel {channel_id} is referenced by {references} idea(s)")


class StatusInUseError(CreatorFlowError):
    """Deleting a status was refused because ideas still reference it."""
    def __init__(self, status_id, references: int):
        self.status_id = status_id
        self.references = references
        super().__init__(f"Status {status_id} is referenced by {references} idea(s)")


class MalformedRowError(CreatorFlowError):
    """A stored row could not be mapped onto its record schema."""
    def __init__(self, resource: str, row_id, reason: str):
        self.resource = resource
        self.row_id = row_id
        self.reason = reason
        super().__init__(f"Malformed {resource} row {row_id}: {reason}")


class InteractionBlockedError(CreatorFlowError):
    """The view router is waiting on a confirmation dialog to resolve."""


class IdentityError(CreatorFlowError):
    """The external identity service rejected or failed a session request."""
    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


__all__ = [
    "CreatorFlowError",
    "SyncFailedError",
    "DraftValidationError",
    "ChannelInUseError",
    "StatusInUseError",
    "MalformedRowError",
    "InteractionBlockedError",
    "IdentityError",
]
