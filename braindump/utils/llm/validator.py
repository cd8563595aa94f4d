"""Structural validation of decoded extraction payloads.

A payload is trusted only after it passes here. Nothing is coerced or
defaulted: a priority of "urgent" is a failure, not a "high".
"""

from datetime import date, datetime
from typing import Any, get_args

from braindump.models import Category, EnergyLevel, EventType, HabitFrequency, Priority, TimeEstimate

PRIORITIES = frozenset(get_args(Priority))
CATEGORIES = frozenset(get_args(Category))
TIME_ESTIMATES = frozenset(get_args(TimeEstimate))
ENERGY_LEVELS = frozenset(get_args(EnergyLevel))
HABIT_FREQUENCIES = frozenset(get_args(HabitFrequency))
EVENT_TYPES = frozenset(get_args(EventType))

TOP_LEVEL_KEYS = ("tasks", "habits", "events", "sleepSchedules")


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO 8601 date or datetime string; None if it is not one."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(text), datetime.min.time())
    except ValueError:
        return None


def _check_member(
    problems: list[str], where: str, item: dict, key: str, allowed: frozenset
) -> None:
    value = item.get(key)
    if not isinstance(value, str) or value not in allowed:
        problems.append(f"{where}.{key} {value!r} is not one of {sorted(allowed)}")


def _check_optional_date(problems: list[str], where: str, item: dict, key: str) -> None:
    value = item.get(key)
    if value is not None and parse_datetime(value) is None:
        problems.append(f"{where}.{key} {value!r} is not an ISO 8601 date")


def _check_task(problems: list[str], where: str, task: dict) -> None:
    if not _non_empty_str(task.get("title")):
        problems.append(f"{where}.title must be a non-empty string")
    _check_member(problems, where, task, "priority", PRIORITIES)
    _check_member(problems, where, task, "category", CATEGORIES)
    _check_member(problems, where, task, "timeEstimate", TIME_ESTIMATES)
    _check_member(problems, where, task, "energyLevel", ENERGY_LEVELS)
    _check_optional_date(problems, where, task, "dueDate")


def _check_habit(problems: list[str], where: str, habit: dict) -> None:
    if not _non_empty_str(habit.get("title")):
        problems.append(f"{where}.title must be a non-empty string")
    _check_member(problems, where, habit, "frequency", HABIT_FREQUENCIES)
    scheduled = habit.get("scheduledTime")
    if scheduled is not None and not isinstance(scheduled, str):
        problems.append(f"{where}.scheduledTime must be a string")


def _check_event(problems: list[str], where: str, event: dict) -> None:
    if not _non_empty_str(event.get("title")):
        problems.append(f"{where}.title must be a non-empty string")
    start = parse_datetime(event.get("startTime"))
    end = parse_datetime(event.get("endTime"))
    if start is None:
        problems.append(f"{where}.startTime must be an ISO 8601 datetime")
    if end is None:
        problems.append(f"{where}.endTime must be an ISO 8601 datetime")
    if start is not None and end is not None:
        try:
            if end < start:
                problems.append(f"{where}.endTime is earlier than startTime")
        except TypeError:
            problems.append(f"{where} mixes timezone-aware and naive times")
    if not isinstance(event.get("isFixed"), bool):
        problems.append(f"{where}.isFixed must be a boolean")
    if "type" in event:
        _check_member(problems, where, event, "type", EVENT_TYPES)


def _check_sleep(problems: list[str], where: str, schedule: dict) -> None:
    if not _non_empty_str(schedule.get("bedtime")):
        problems.append(f"{where}.bedtime must be a non-empty string")
    if not _non_empty_str(schedule.get("wakeTime")):
        problems.append(f"{where}.wakeTime must be a non-empty string")
    _check_optional_date(problems, where, schedule, "date")


_ITEM_CHECKS = {
    "tasks": _check_task,
    "habits": _check_habit,
    "events": _check_event,
    "sleepSchedules": _check_sleep,
}


def find_payload_problems(payload: Any) -> list[str]:
    """Return every reason the payload fails the extraction schema.

    Args:
        payload: Decoded JSON value from a backend reply.

    Returns:
        Human-readable problems; empty when the payload conforms.
    """
    if not isinstance(payload, dict):
        return [f"payload must be a JSON object, got {type(payload).__name__}"]

    problems: list[str] = []
    for key in TOP_LEVEL_KEYS:
        if key not in payload:
            problems.append(f"missing top-level field {key!r}")
            continue
        items = payload[key]
        if not isinstance(items, list):
            problems.append(f"{key} must be a list")
            continue
        check = _ITEM_CHECKS[key]
        for index, item in enumerate(items):
            where = f"{key}[{index}]"
            if not isinstance(item, dict):
                problems.append(f"{where} must be an object")
                continue
            check(problems, where, item)
    return problems


def validate_extraction_payload(payload: Any) -> bool:
    """Return True only if the payload fully conforms to the extraction schema."""
    return not find_payload_problems(payload)
