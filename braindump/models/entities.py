"""Actionable records extracted from a brain dump: tasks, habits, events, sleep."""

import uuid
from datetime import date, datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

Priority = Literal["high", "medium", "low"]
Category = Literal["work", "personal", "health", "communication", "home", "other"]
TimeEstimate = Literal["15min", "30min", "45min", "1hr", "2hr", "3hr+"]
EnergyLevel = Literal["high", "medium", "low"]
TaskStatus = Literal["not_started", "in_progress", "completed", "cancelled"]
HabitFrequency = Literal["daily", "weekly", "custom"]
EventType = Literal["appointment", "meeting", "deadline", "social", "other"]

# Alias so SleepSchedule can name a field "date"
CalendarDate = date


def new_id() -> str:
    """Return a fresh entity identifier."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(BaseModel):
    """A one-time action with a clear outcome."""

    id: str = Field(default_factory=new_id, description="Unique identifier (UUID)")
    title: str = Field(min_length=1)
    description: Optional[str] = None
    priority: Priority
    category: Category
    time_estimate: TimeEstimate
    energy_level: EnergyLevel
    status: TaskStatus = "not_started"
    due_date: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Habit(BaseModel):
    """A recurring behavior the user wants to build into a routine."""

    id: str = Field(default_factory=new_id, description="Unique identifier (UUID)")
    title: str = Field(min_length=1)
    description: Optional[str] = None
    frequency: HabitFrequency
    scheduled_time: Optional[str] = Field(None, description="Time of day, HH:MM")
    is_active: bool = True
    streak: int = Field(default=0, ge=0)
    completed_dates: list[date] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


class CalendarEvent(BaseModel):
    """A time-bound entry on the calendar."""

    id: str = Field(default_factory=new_id, description="Unique identifier (UUID)")
    title: str = Field(min_length=1)
    start_time: datetime
    end_time: datetime
    type: EventType = "appointment"
    is_fixed: bool = True

    @model_validator(mode="after")
    def _check_time_order(self) -> "CalendarEvent":
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be earlier than start_time")
        return self


class SleepSchedule(BaseModel):
    """Planned bedtime and wake time for one night."""

    id: str = Field(default_factory=new_id, description="Unique identifier (UUID)")
    bedtime: str = Field(min_length=1, description="Time of day, HH:MM")
    wake_time: str = Field(min_length=1, description="Time of day, HH:MM")
    date: CalendarDate = Field(default_factory=lambda: _utcnow().date())
    sleep_quality: Optional[int] = Field(None, ge=0, le=10)
