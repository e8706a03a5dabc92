from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import TypedDict


# PUBLIC_INTERFACE
class ReminderEntity(TypedDict):
    """
    A lightweight domain model representing a reminder held by the store.

    Fields:
    - id: Unique identifier assigned when the reminder is added
    - title: Short title (non-empty once committed)
    - description: Detailed description (non-empty once committed)
    - date: Local calendar date of the reminder
    - time: Local time of day (second precision)
    - notify_when: Lead time in hours before date/time at which to notify
    - should_notify: Transient "due now" flag set by the scheduler
    - did_notify: Persisted "already delivered" flag
    """

    id: str
    title: str
    description: str
    date: date
    time: time
    notify_when: int
    should_notify: bool
    did_notify: bool


# PUBLIC_INTERFACE
def is_complete(title: str, description: str) -> bool:
    """Return True when both title and description carry non-blank text."""
    return bool((title or "").strip()) and bool((description or "").strip())


# PUBLIC_INTERFACE
def notify_instant(entity: ReminderEntity) -> datetime:
    """Return the local moment at which the reminder should fire."""
    return datetime.combine(entity["date"], entity["time"]) - timedelta(hours=entity["notify_when"])


def same_minute(a: datetime, b: datetime) -> bool:
    return a.date() == b.date() and a.hour == b.hour and a.minute == b.minute
