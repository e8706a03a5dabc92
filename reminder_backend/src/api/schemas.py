from __future__ import annotations

import datetime as dt
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from .models import ReminderEntity

# The original picker offered 0..24 hours of lead time
MAX_LEAD_HOURS = 24


def _now_time() -> dt.time:
    return dt.datetime.now().time().replace(microsecond=0)


def _new_id() -> str:
    return uuid4().hex


def _strip_required(value: str, field: str) -> str:
    """
    Internal helper to strip whitespace and reject blank text.
    """
    if value is None:
        raise ValueError(f"{field} is required")
    s = value.strip()
    if not s:
        raise ValueError(f"{field} must not be empty")
    return s


# PUBLIC_INTERFACE
class ReminderCreate(BaseModel):
    """
    Schema for creating a new reminder.

    Title and description are both required; a reminder missing either is
    incomplete and is rejected before it reaches the store.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Dentist",
                "description": "Check-up at the clinic on Main St.",
                "date": "2025-02-01",
                "time": "14:00:00",
                "notify_when": 1,
            }
        }
    )

    title: str = Field(..., description="Short title of the reminder")
    description: str = Field(..., description="What the reminder is about")
    date: dt.date = Field(default_factory=dt.date.today, description="Local calendar date (ISO8601)")
    time: dt.time = Field(
        default_factory=_now_time,
        description="Local time of day (ISO8601); sub-second precision is dropped",
    )
    notify_when: int = Field(
        default=0,
        ge=0,
        le=MAX_LEAD_HOURS,
        description="Hours before date/time at which to notify",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _strip_required(v, "title")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _strip_required(v, "description")

    @field_validator("time")
    @classmethod
    def truncate_time(cls, v: dt.time) -> dt.time:
        """
        Keep second precision only.
        """
        return v.replace(microsecond=0)


# PUBLIC_INTERFACE
class ReminderOut(BaseModel):
    """
    Schema returned by the API for a reminder.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "4f1c2a9e0b7d4c1e8a3f5d6b7c8e9f01",
                "title": "Dentist",
                "description": "Check-up at the clinic on Main St.",
                "date": "2025-02-01",
                "time": "14:00:00",
                "notify_when": 1,
                "should_notify": False,
                "did_notify": False,
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the reminder")
    title: str = Field(..., description="Short title of the reminder")
    description: str = Field(..., description="What the reminder is about")
    date: dt.date = Field(..., description="Local calendar date")
    time: dt.time = Field(..., description="Local time of day")
    notify_when: int = Field(..., description="Lead time in hours")
    should_notify: bool = Field(..., description="True while the reminder is due and not yet delivered")
    did_notify: bool = Field(..., description="True once the notification has been delivered")


# PUBLIC_INTERFACE
class ReminderList(BaseModel):
    """
    Envelope for list responses, in store (insertion) order.
    """

    items: List[ReminderOut] = Field(..., description="Reminders in insertion order")
    total: int = Field(..., description="Number of reminders returned")


# PUBLIC_INTERFACE
class ReminderRecord(BaseModel):
    """
    One row of the backing JSON file.

    Files written before reminders carried an id are accepted; such rows get a
    fresh id on load.
    """

    id: str = Field(default_factory=_new_id)
    title: str
    description: str
    date: dt.date
    time: dt.time
    notify_when: int = Field(..., ge=0)
    should_notify: bool = False
    did_notify: bool = False

    @classmethod
    def from_entity(cls, entity: ReminderEntity) -> "ReminderRecord":
        return cls(**entity)

    def to_entity(self) -> ReminderEntity:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "date": self.date,
            "time": self.time,
            "notify_when": self.notify_when,
            "should_notify": self.should_notify,
            "did_notify": self.did_notify,
        }


RecordListAdapter = TypeAdapter(List[ReminderRecord])


# PUBLIC_INTERFACE
def parse_records(raw: str) -> List[ReminderEntity]:
    """
    Parse the backing file's JSON text into entities.

    Raises:
        pydantic.ValidationError if the text is not a JSON array of valid rows.
    """
    return [r.to_entity() for r in RecordListAdapter.validate_json(raw)]


# PUBLIC_INTERFACE
def dump_records(entities: List[ReminderEntity], indent: Optional[int] = None) -> bytes:
    """Serialize entities to the backing file's JSON format."""
    records = [ReminderRecord.from_entity(e) for e in entities]
    return RecordListAdapter.dump_json(records, indent=indent)
