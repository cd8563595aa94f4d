"""Keyword-based extraction used when no AI backend is available.

Fast, offline and deterministic, but far less capable than a model: it only
recognizes a handful of phrasings for tasks and habits and never produces
events or sleep schedules.
"""

import re
from datetime import datetime, timezone

from braindump.models import (
    Category,
    EnergyLevel,
    ExtractionResult,
    Habit,
    Priority,
    Task,
    TimeEstimate,
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")

_TASK_PATTERNS = [
    re.compile(rf"\b{verb} (.+)")
    for verb in (
        "need to",
        "have to",
        "must",
        "should",
        "finish",
        "complete",
        "call",
        "email",
        "buy",
        "get",
        "do",
        "write",
        "prepare",
        "schedule",
        "book",
        "pay",
        "submit",
    )
]

_HABIT_START = re.compile(r"\bwant to start (.+)")
_HABIT_PHRASES = [
    (re.compile(r"\bneed to exercise"), "daily exercise"),
    (re.compile(r"\bshould meditate"), "daily meditation"),
    (re.compile(r"\bwant to read"), "daily reading"),
    (re.compile(r"\bshould drink more water"), "drink more water"),
    (re.compile(r"\bwant to journal"), "daily journaling"),
    (re.compile(r"\bshould wake up earlier"), "wake up earlier"),
    (re.compile(r"\bneed to go to bed earlier"), "go to bed earlier"),
]

DEFAULT_TASK_TITLE = "Review brain dump notes"


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def infer_priority(sentence: str) -> Priority:
    urgent_words = ["urgent", "asap", "immediately", "deadline", "due", "emergency"]
    important_words = ["important", "critical", "must", "need", "essential"]

    if any(word in sentence for word in urgent_words):
        return "high"
    if any(word in sentence for word in important_words):
        return "high"
    if "should" in sentence or "want to" in sentence:
        return "medium"
    return "low"


def infer_category(sentence: str) -> Category:
    if any(kw in sentence for kw in ("work", "project", "meeting", "presentation")):
        return "work"
    if any(kw in sentence for kw in ("doctor", "exercise", "health", "medicine")):
        return "health"
    if any(kw in sentence for kw in ("call", "email", "text", "message")):
        return "communication"
    if any(kw in sentence for kw in ("clean", "groceries", "home", "house")):
        return "home"
    return "personal"


def infer_time_estimate(sentence: str) -> TimeEstimate:
    if "quick" in sentence or "brief" in sentence:
        return "15min"
    if any(kw in sentence for kw in ("long", "detailed", "thorough")):
        return "2hr"
    if "meeting" in sentence or "call" in sentence:
        return "1hr"
    return "30min"


def infer_energy_level(sentence: str) -> EnergyLevel:
    high_energy_words = ["creative", "think", "plan", "design", "write", "analyze"]
    low_energy_words = ["clean", "organize", "file", "sort", "routine"]

    if any(word in sentence for word in high_energy_words):
        return "high"
    if any(word in sentence for word in low_energy_words):
        return "low"
    return "medium"


def _match_task(sentence: str, now: datetime) -> Task | None:
    for pattern in _TASK_PATTERNS:
        match = pattern.search(sentence)
        if match:
            title = match.group(1).strip()
            if len(title) > 2:
                return Task(
                    title=_capitalize_first(title),
                    priority=infer_priority(sentence),
                    category=infer_category(sentence),
                    time_estimate=infer_time_estimate(sentence),
                    energy_level=infer_energy_level(sentence),
                    created_at=now,
                    updated_at=now,
                )
    return None


def _match_habit(sentence: str, now: datetime) -> Habit | None:
    title = ""
    match = _HABIT_START.search(sentence)
    if match:
        title = match.group(1).strip()
    else:
        for pattern, phrase_title in _HABIT_PHRASES:
            if pattern.search(sentence):
                title = phrase_title
                break

    if len(title) <= 2:
        return None
    return Habit(title=_capitalize_first(title), frequency="daily", created_at=now)


def extract_heuristic(text: str) -> ExtractionResult:
    """Extract tasks and habits from text without calling any backend.

    Args:
        text: Raw brain dump text.

    Returns:
        ExtractionResult with tasks and habits only. Non-empty text always
        yields at least one task; a generic review task is added when no
        phrasing matched.
    """
    now = datetime.now(timezone.utc)
    tasks: list[Task] = []
    habits: list[Habit] = []

    for raw in _SENTENCE_SPLIT.split(text):
        sentence = raw.strip().lower()
        if not sentence:
            continue
        task = _match_task(sentence, now)
        if task is not None:
            tasks.append(task)
        habit = _match_habit(sentence, now)
        if habit is not None:
            habits.append(habit)

    if not tasks and text.strip():
        tasks.append(
            Task(
                title=DEFAULT_TASK_TITLE,
                priority="medium",
                category="personal",
                time_estimate="15min",
                energy_level="low",
                created_at=now,
                updated_at=now,
            )
        )

    return ExtractionResult(tasks=tasks, habits=habits)
