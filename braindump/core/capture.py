"""Brain dump capture with an opt-in offline fallback."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Literal, Optional

from braindump.models import ExtractionResult
from braindump.utils.llm import AISettings, ExtractionError

from .heuristics import extract_heuristic
from .service import ExtractionService

logger = logging.getLogger(__name__)

CaptureSource = Literal["ai", "heuristic"]


@dataclass
class CaptureOutcome:
    """Extraction result plus where it came from."""

    result: ExtractionResult
    source: CaptureSource
    error: Optional[ExtractionError] = None  # Set when AI failed and heuristics ran


async def process_brain_dump(
    text: str,
    settings: AISettings,
    service: ExtractionService,
    fallback: bool = False,
    today: Optional[date] = None,
) -> CaptureOutcome:
    """Extract items from a brain dump, optionally falling back to heuristics.

    Args:
        text: Raw brain dump text.
        settings: The user's AI configuration.
        service: Extraction service to run the AI path.
        fallback: If True, unconfigured AI or any AI failure yields a
            heuristic result instead of an exception.
        today: Reference date for relative phrases.

    Returns:
        CaptureOutcome with the result and its source.

    Raises:
        ExtractionError: When AI fails and ``fallback`` is False.
    """
    if fallback and not settings.is_configured():
        logger.info("AI not configured, using heuristic extraction")
        return CaptureOutcome(result=extract_heuristic(text), source="heuristic")

    try:
        result = await service.process_text(text, settings, today=today)
    except ExtractionError as e:
        if not fallback:
            raise
        logger.warning("AI processing failed, falling back to heuristics: %s", e)
        return CaptureOutcome(result=extract_heuristic(text), source="heuristic", error=e)
    return CaptureOutcome(result=result, source="ai")
