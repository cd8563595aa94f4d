"""Turn a backend reply into domain entities.

Order is fixed: locate the payload, decode it, validate it, then translate.
Translation never runs on a payload the validator has not accepted.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from braindump.models import (
    CalendarEvent,
    ExtractionResult,
    Habit,
    SleepSchedule,
    Task,
    TokenUsage,
)

from .config import ExtractionTypes
from .errors import ParseError, ValidationError
from .json_parser import extract_payload_text
from .validator import find_payload_problems, parse_datetime

logger = logging.getLogger(__name__)


def decode_reply(provider: str, label: str, reply: str) -> tuple[dict[str, Any], str]:
    """Locate and decode the JSON payload inside a backend reply.

    Returns:
        Tuple of (decoded payload, payload text).

    Raises:
        ParseError: No payload could be located, or it failed to decode.
    """
    payload_text = extract_payload_text(reply)
    if payload_text is None:
        raise ParseError(f"Could not find JSON in {label} response", provider=provider)
    try:
        payload = json.loads(payload_text)
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"Malformed JSON in {label} response: {exc.msg}",
            provider=provider,
            original_error=exc,
        ) from exc
    if not isinstance(payload, dict):
        raise ParseError(f"{label} response is not a JSON object", provider=provider)
    return payload, payload_text


def ensure_valid(provider: str, label: str, payload: dict[str, Any]) -> None:
    """Raise ValidationError unless the payload matches the extraction schema."""
    problems = find_payload_problems(payload)
    if problems:
        logger.warning(
            "%s payload failed validation (%d problems): %s",
            label,
            len(problems),
            "; ".join(problems[:5]),
        )
        raise ValidationError(
            f"Invalid response format from {label}: {problems[0]}",
            provider=provider,
            problems=problems,
        )


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _task(item: dict[str, Any], now: datetime) -> Task:
    return Task(
        title=item["title"].strip(),
        description=_optional_text(item.get("description")),
        priority=item["priority"],
        category=item["category"],
        time_estimate=item["timeEstimate"],
        energy_level=item["energyLevel"],
        due_date=parse_datetime(item.get("dueDate")),
        created_at=now,
        updated_at=now,
    )


def _habit(item: dict[str, Any], now: datetime) -> Habit:
    return Habit(
        title=item["title"].strip(),
        description=_optional_text(item.get("description")),
        frequency=item["frequency"],
        scheduled_time=_optional_text(item.get("scheduledTime")),
        created_at=now,
    )


def _event(item: dict[str, Any]) -> CalendarEvent:
    return CalendarEvent(
        title=item["title"].strip(),
        start_time=parse_datetime(item["startTime"]),
        end_time=parse_datetime(item["endTime"]),
        type=item.get("type", "appointment"),
        is_fixed=item["isFixed"],
    )


def _sleep(item: dict[str, Any], now: datetime) -> SleepSchedule:
    parsed = parse_datetime(item.get("date"))
    return SleepSchedule(
        bedtime=item["bedtime"].strip(),
        wake_time=item["wakeTime"].strip(),
        date=parsed.date() if parsed else now.date(),
    )


def translate_payload(
    provider: str,
    payload: dict[str, Any],
    raw_response: Optional[str] = None,
    usage: Optional[TokenUsage] = None,
    extraction_types: Optional[ExtractionTypes] = None,
) -> ExtractionResult:
    """Build domain entities from a validated payload.

    Identifiers are always freshly generated and timestamps are stamped now;
    any ``id`` the model supplied is ignored. Categories disabled in
    ``extraction_types`` are dropped.
    """
    types = extraction_types or ExtractionTypes()
    now = datetime.now(timezone.utc)
    try:
        result = ExtractionResult(
            tasks=[_task(t, now) for t in payload["tasks"]] if types.tasks else [],
            habits=[_habit(h, now) for h in payload["habits"]] if types.habits else [],
            events=[_event(e) for e in payload["events"]] if types.events else [],
            sleep_schedules=(
                [_sleep(s, now) for s in payload["sleepSchedules"]] if types.sleep else []
            ),
            raw_response=raw_response,
            usage=usage,
        )
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Extracted items do not fit the domain model: {exc.error_count()} errors",
            provider=provider,
            problems=[err["msg"] for err in exc.errors()],
            original_error=exc,
        ) from exc

    logger.debug("Translated %s payload: %s", provider, result.counts())
    return result


def build_result(
    provider: str,
    label: str,
    reply: str,
    usage: Optional[TokenUsage] = None,
    extraction_types: Optional[ExtractionTypes] = None,
) -> ExtractionResult:
    """Run the locate -> decode -> validate -> translate pipeline on a reply.

    The full reply, prose included, is kept as ``raw_response``.
    """
    payload, _ = decode_reply(provider, label, reply)
    ensure_valid(provider, label, payload)
    return translate_payload(provider, payload, reply, usage, extraction_types)
