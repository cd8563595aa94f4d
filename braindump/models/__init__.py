"""Domain models."""

from .entities import (
    CalendarEvent,
    Category,
    EnergyLevel,
    EventType,
    Habit,
    HabitFrequency,
    Priority,
    SleepSchedule,
    Task,
    TaskStatus,
    TimeEstimate,
    new_id,
)
from .extraction import BackendName, ExtractionResult, ModelInfo, ProviderName, TokenUsage

__all__ = [
    "BackendName",
    "CalendarEvent",
    "Category",
    "EnergyLevel",
    "EventType",
    "ExtractionResult",
    "Habit",
    "HabitFrequency",
    "ModelInfo",
    "Priority",
    "ProviderName",
    "SleepSchedule",
    "Task",
    "TaskStatus",
    "TimeEstimate",
    "TokenUsage",
    "new_id",
]
