"""In-memory cache of extraction results keyed by request fingerprint."""

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from braindump.models import ExtractionResult
from braindump.utils.llm.config import ExtractionTypes
from braindump.utils.llm.constants import DEFAULT_CACHE_MAX_SIZE, DEFAULT_CACHE_TTL_SECONDS
from braindump.utils.llm.prompts import preprocess_brain_dump

logger = logging.getLogger(__name__)


def make_fingerprint(
    text: str,
    backend: str,
    model: str,
    temperature: Optional[float],
    max_tokens: Optional[int],
    extraction_types: Optional[ExtractionTypes] = None,
) -> str:
    """Derive a deterministic cache key for an extraction request.

    Text is normalized the same way the prompt builder normalizes it, so
    inputs that produce the same prompt share a key. Enabled categories are
    part of the key because they change the prompt.

    Returns:
        Hex SHA-256 digest.
    """
    types = extraction_types or ExtractionTypes()
    data = json.dumps(
        {
            "text": preprocess_brain_dump(text),
            "backend": backend,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "categories": types.enabled(),
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    """A cached extraction result and when it was stored."""

    key: str
    result: ExtractionResult
    inserted_at: float


class ExtractionCache:
    """Bounded TTL cache with insertion-order eviction.

    Expiry is checked lazily on lookup; there is no background sweep. When
    full, the oldest inserted entry is evicted regardless of how often it
    was read. A TTL or capacity of zero disables caching without error.

    Thread-safe: every operation holds one lock, so eviction and insertion
    are never observed half-done.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        max_size: int = DEFAULT_CACHE_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        if max_size < 0:
            raise ValueError("max_size must be >= 0")
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for key, or None.

        An expired entry is removed as part of the lookup. The returned
        entry carries a copy of the stored result.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at >= self._ttl:
                del self._entries[key]
                logger.debug("Cache entry expired: %s", key[:12])
                return None
            return CacheEntry(
                key=entry.key,
                result=entry.result.model_copy(deep=True),
                inserted_at=entry.inserted_at,
            )

    def set(self, key: str, result: ExtractionResult) -> None:
        """Store an independent copy of result under key."""
        if self._max_size == 0:
            return
        entry = CacheEntry(
            key=key,
            result=result.model_copy(deep=True),
            inserted_at=self._clock(),
        )
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_size:
                oldest_key, _ = self._entries.popitem(last=False)
                logger.debug("Cache full, evicted oldest entry: %s", oldest_key[:12])
            self._entries[key] = entry

    def clear(self) -> None:
        """Remove every entry unconditionally."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d cached extraction results", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
