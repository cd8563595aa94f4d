"""Global fixtures: sample payloads, settings and a deterministic clock."""

import json
from typing import Any

import pytest

from braindump.utils.llm import AISettings


class FakeClock:
    """Manually advanced monotonic clock for cache tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    """Well-formed payload with one item of each kind (model-supplied ids included)."""
    return {
        "tasks": [
            {
                "id": "model-task-1",
                "title": "Call mom",
                "description": "Ask about the weekend",
                "priority": "medium",
                "category": "communication",
                "timeEstimate": "15min",
                "energyLevel": "low",
                "dueDate": "2026-10-18",
            }
        ],
        "habits": [
            {
                "id": "model-habit-1",
                "title": "Exercise",
                "frequency": "daily",
                "scheduledTime": "07:00",
            }
        ],
        "events": [
            {
                "id": "model-event-1",
                "title": "Dentist",
                "startTime": "2026-10-20T09:00:00",
                "endTime": "2026-10-20T10:00:00",
                "type": "appointment",
                "isFixed": True,
            }
        ],
        "sleepSchedules": [
            {
                "id": "model-sleep-1",
                "bedtime": "22:30",
                "wakeTime": "06:30",
                "date": "2026-10-18",
            }
        ],
    }


@pytest.fixture
def valid_reply(valid_payload: dict[str, Any]) -> str:
    """Backend reply that wraps the payload in prose and a code block."""
    return (
        "Here is what I found in your brain dump:\n\n```json\n"
        + json.dumps(valid_payload, indent=2)
        + "\n```\nLet me know if you want changes!"
    )


@pytest.fixture
def ai_settings() -> AISettings:
    return AISettings(provider="openai", api_key="sk-test", model="gpt-4o-mini")
