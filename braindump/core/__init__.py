"""Application logic layer."""

from .cache import CacheEntry, ExtractionCache, make_fingerprint
from .capture import CaptureOutcome, process_brain_dump
from .heuristics import extract_heuristic
from .service import ExtractionService

__all__ = [
    "CacheEntry",
    "CaptureOutcome",
    "ExtractionCache",
    "ExtractionService",
    "extract_heuristic",
    "make_fingerprint",
    "process_brain_dump",
]
