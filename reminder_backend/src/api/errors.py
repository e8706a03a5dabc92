"""
Error types raised by the reminder store and the notification scheduler.

None of these end the process: callers report them and keep the in-memory
reminder list alive.
"""
from __future__ import annotations


class StoreError(Exception):
    """Base class for failures of the reminder store."""


# PUBLIC_INTERFACE
class StoreCorruptError(StoreError):
    """
    The backing file exists and is non-empty but does not parse as a list of
    reminders. Writes stay halted until the file is fixed and reloaded.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Reminder file {path!r} is corrupt: {reason}")
        self.path = path
        self.reason = reason


# PUBLIC_INTERFACE
class StoreIOError(StoreError):
    """Reading or writing the backing file failed at the OS level."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"I/O failure on reminder file {path!r}: {reason}")
        self.path = path
        self.reason = reason


# PUBLIC_INTERFACE
class IncompleteReminderError(ValueError):
    """A reminder without both a title and a description was offered to the store."""


# PUBLIC_INTERFACE
class NotificationSinkError(Exception):
    """The desktop notification backend failed to show a notification."""


# PUBLIC_INTERFACE
class UnsavedChangesError(StoreError):
    """Reloading now would discard in-memory changes that never reached the file."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Reminder file {path!r} cannot be reloaded: {reason}")
        self.path = path
        self.reason = reason
