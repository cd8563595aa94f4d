"""Provider-neutral extraction result and backend metadata."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from .entities import CalendarEvent, Habit, SleepSchedule, Task

BackendName = Literal["openai", "claude", "gemini"]
ProviderName = Literal["openai", "claude", "gemini", "none"]


class TokenUsage(BaseModel):
    """Token accounting reported by the backend for one request."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ExtractionResult(BaseModel):
    """Normalized output of one extraction, whichever backend produced it."""

    tasks: list[Task] = Field(default_factory=list)
    habits: list[Habit] = Field(default_factory=list)
    events: list[CalendarEvent] = Field(default_factory=list)
    sleep_schedules: list[SleepSchedule] = Field(default_factory=list)
    raw_response: Optional[str] = None
    usage: Optional[TokenUsage] = None

    def is_empty(self) -> bool:
        return not (self.tasks or self.habits or self.events or self.sleep_schedules)

    def counts(self) -> dict[str, int]:
        """Return the number of extracted items per category."""
        return {
            "tasks": len(self.tasks),
            "habits": len(self.habits),
            "events": len(self.events),
            "sleep_schedules": len(self.sleep_schedules),
        }


class ModelInfo(BaseModel):
    """A model identifier a backend advertises for extraction."""

    id: str
    name: str
    description: Optional[str] = None
    max_tokens: Optional[int] = Field(None, description="Context window in tokens")
