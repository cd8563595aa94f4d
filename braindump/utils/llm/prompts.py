"""Prompt assembly for brain dump extraction.

The system prompt is shared by every backend and fixes the JSON shape the
response validator expects. Each backend may add a short phrasing hint, but
never changes that shape.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .config import ExtractionTypes

SYSTEM_PROMPT = """You are an assistant that helps people with ADHD organize their thoughts. \
Your job is to read a brain dump and extract actionable items from it.

GUIDELINES:
1. Be empathetic to executive dysfunction, time blindness and overwhelm
2. Break complex thoughts into simple, concrete items
3. Recognize both explicit and implicit items
4. Prioritize by urgency: deadlines, "asap", "today" and consequences mean high; \
things the person "should" or "wants to" do mean medium; everything else low
5. Give realistic time estimates and round up, since time blindness makes people \
underestimate: quick calls or emails are 15min, focused work blocks 1hr or more

EXTRACTION RULES:
- Tasks: one-time actions with a clear outcome
- Habits: recurring behaviors worth building into a routine
- Events: things that happen at a specific date and time (appointments, meetings, \
deadlines, social plans)
- Sleep: intended bedtimes and wake times
- Each item must be concise and actionable
- Never invent items that the text does not support

OUTPUT FORMAT:
Respond with valid JSON in exactly this shape. All four top-level keys are \
required; use an empty list when nothing applies.
{
  "tasks": [
    {
      "title": "Clear, actionable task title",
      "description": "Optional additional context",
      "priority": "high|medium|low",
      "category": "work|personal|health|communication|home|other",
      "timeEstimate": "15min|30min|45min|1hr|2hr|3hr+",
      "energyLevel": "high|medium|low",
      "dueDate": "Optional ISO 8601 date or datetime"
    }
  ],
  "habits": [
    {
      "title": "Simple habit name",
      "description": "Why this habit helps",
      "frequency": "daily|weekly|custom",
      "scheduledTime": "HH:MM"
    }
  ],
  "events": [
    {
      "title": "Event title",
      "startTime": "ISO 8601 datetime",
      "endTime": "ISO 8601 datetime, not before startTime",
      "type": "appointment|meeting|deadline|social|other",
      "isFixed": true
    }
  ],
  "sleepSchedules": [
    {
      "bedtime": "HH:MM",
      "wakeTime": "HH:MM",
      "date": "ISO 8601 date"
    }
  ]
}"""

# Backend-specific phrasing appended to the system prompt.
BACKEND_INSTRUCTIONS: dict[str, str] = {
    "openai": (
        "Use your understanding of ADHD to be especially helpful. "
        "Focus on practical, achievable actions."
    ),
    "claude": (
        "Apply your knowledge of executive function challenges to create "
        "supportive, non-judgmental suggestions. Respond with valid JSON only."
    ),
    "gemini": (
        "Consider neurodiversity perspectives and suggest accommodations that work "
        "with ADHD traits. Respond with valid JSON only, no additional text or markdown."
    ),
}

_CATEGORY_LABELS = {
    "tasks": "tasks",
    "habits": "habits",
    "events": "calendar events",
    "sleep": "sleep schedules",
}

_TERMINAL_PUNCTUATION = re.compile(r"[.!?]$")
_WHITESPACE = re.compile(r"\s+")
_REPEATED_PUNCTUATION = re.compile(r"([.!?])\1+")


@dataclass(frozen=True)
class Prompt:
    """Instruction payload for one backend request."""

    system: str
    user: str


def preprocess_brain_dump(text: str) -> str:
    """Normalize scattered input into one paragraph.

    Lines without terminal punctuation get a period, runs of whitespace
    collapse to one space and repeated ``.``/``!``/``?`` collapse to one.
    """
    lines = []
    for line in text.split("\n"):
        trimmed = line.strip()
        if trimmed and not _TERMINAL_PUNCTUATION.search(trimmed):
            trimmed += "."
        lines.append(trimmed)

    processed = _WHITESPACE.sub(" ", " ".join(lines))
    processed = _REPEATED_PUNCTUATION.sub(r"\1", processed)
    return processed.strip()


def _describe_categories(extraction_types: ExtractionTypes) -> str:
    enabled = [_CATEGORY_LABELS[name] for name in extraction_types.enabled()]
    if not enabled:
        return "nothing (return empty lists for every key)"
    return ", ".join(enabled)


def build_user_prompt(
    text: str,
    extraction_types: Optional[ExtractionTypes] = None,
    today: Optional[date] = None,
) -> str:
    """Build the per-request instruction.

    Args:
        text: Raw brain dump text (preprocessed here).
        extraction_types: Categories to extract; all enabled when None.
        today: Reference date for relative phrases like "tomorrow";
            the current local date when None.

    Returns:
        The user prompt string.
    """
    types = extraction_types or ExtractionTypes()
    today = today or date.today()
    disabled = [
        key
        for name, key in (
            ("tasks", "tasks"),
            ("habits", "habits"),
            ("events", "events"),
            ("sleep", "sleepSchedules"),
        )
        if name not in types.enabled()
    ]

    parts = [
        f"Extract the following from this brain dump: {_describe_categories(types)}.",
        f"Today is {today:%A}, {today:%B} {today.day}, {today.year} "
        f"({today.isoformat()}). Resolve relative dates such as \"tomorrow\" "
        "against this date.",
    ]
    if disabled:
        parts.append(
            "Return an empty list for: " + ", ".join(f'"{key}"' for key in disabled) + "."
        )
    parts.append(f'Brain dump:\n"{preprocess_brain_dump(text)}"')
    parts.append(
        "Remember to be understanding of scattered thoughts and to create "
        "actionable items even from vague ideas."
    )
    return "\n\n".join(parts)


def build_prompt(
    text: str,
    backend: str,
    extraction_types: Optional[ExtractionTypes] = None,
    today: Optional[date] = None,
) -> Prompt:
    """Build the full instruction payload for a backend.

    Deterministic for a given ``today``; when ``today`` is None the current
    local date is read, so pass it explicitly for reproducible prompts.
    """
    system = SYSTEM_PROMPT
    fragment = BACKEND_INSTRUCTIONS.get(backend)
    if fragment:
        system = f"{system}\n\n{fragment}"
    return Prompt(system=system, user=build_user_prompt(text, extraction_types, today))
