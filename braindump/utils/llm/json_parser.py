"""Locate and decode the JSON payload inside an LLM reply.

Different models output JSON differently:
- Some return clean JSON
- Some wrap it in markdown code blocks (```json...```)
- Some add explanatory text before/after

Replies are untrusted: these helpers only find and decode the payload.
Shape checks happen afterwards in the response validator.
"""

import json
import re
from typing import Optional

_CODE_BLOCK_PATTERNS = (
    re.compile(r"```json\s*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE),
    re.compile(r"```\s*\n?(.*?)\n?```", re.DOTALL),
)


def _decodes(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def locate_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` substring of text.

    Braces inside JSON string literals are ignored, so a title such as
    ``"fix {config}"`` does not end the object early.

    Args:
        text: Raw LLM reply.

    Returns:
        The candidate payload, or None if no balanced object exists.
    """
    if not text:
        return None

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape_next = False

    for i, char in enumerate(text[start:], start):
        if escape_next:
            escape_next = False
            continue

        if char == "\\":
            escape_next = True
            continue

        if char == '"':
            in_string = not in_string
            continue

        if in_string:
            continue

        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None


def extract_payload_text(text: str) -> Optional[str]:
    """Find the best-effort JSON payload substring in an LLM reply.

    Strategy order: whole reply, markdown code block, first balanced object.

    Args:
        text: Raw LLM reply.

    Returns:
        Payload text to decode, or None if nothing resembling an object exists.
    """
    if not text or not text.strip():
        return None

    stripped = text.strip()
    if stripped.startswith("{") and stripped.endswith("}") and _decodes(stripped):
        return stripped

    for pattern in _CODE_BLOCK_PATTERNS:
        match = pattern.search(stripped)
        if match:
            candidate = locate_json_object(match.group(1))
            if candidate is not None:
                return candidate

    return locate_json_object(stripped)

