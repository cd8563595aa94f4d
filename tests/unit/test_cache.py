"""Tests for the extraction result cache and request fingerprints."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from braindump.core.cache import ExtractionCache, make_fingerprint
from braindump.models import ExtractionResult, Task, TokenUsage
from braindump.utils.llm import ExtractionTypes


def _result(title: str = "Call mom") -> ExtractionResult:
    return ExtractionResult(
        tasks=[
            Task(
                title=title,
                priority="medium",
                category="communication",
                time_estimate="15min",
                energy_level="low",
            )
        ],
        usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
    )


BASE = dict(
    text="Call mom tomorrow",
    backend="openai",
    model="gpt-4o-mini",
    temperature=0.7,
    max_tokens=2000,
)


class TestFingerprint:
    """Tests for make_fingerprint."""

    def test_deterministic(self):
        assert make_fingerprint(**BASE) == make_fingerprint(**BASE)

    def test_is_hex_sha256(self):
        key = make_fingerprint(**BASE)
        assert len(key) == 64
        int(key, 16)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("text", "Call dad tomorrow"),
            ("backend", "claude"),
            ("model", "gpt-4o"),
            ("temperature", 0.2),
            ("max_tokens", 1000),
        ],
    )
    def test_each_input_changes_key(self, field, value):
        assert make_fingerprint(**dict(BASE, **{field: value})) != make_fingerprint(**BASE)

    def test_enabled_categories_change_key(self):
        types = ExtractionTypes(events=False)
        assert make_fingerprint(**BASE, extraction_types=types) != make_fingerprint(**BASE)

    def test_whitespace_differences_share_key(self):
        """Texts that normalize to the same prompt text share a key."""
        a = make_fingerprint(**dict(BASE, text="Call mom tomorrow"))
        b = make_fingerprint(**dict(BASE, text="  Call   mom tomorrow.\n"))
        assert a == b


class TestExtractionCache:
    """Tests for TTL expiry, capacity eviction and isolation."""

    def test_miss(self, clock):
        cache = ExtractionCache(clock=clock)
        assert cache.get("missing") is None

    def test_hit_within_ttl(self, clock):
        cache = ExtractionCache(ttl_seconds=3600, clock=clock)
        cache.set("k", _result())

        clock.advance(3599)
        entry = cache.get("k")

        assert entry is not None
        assert entry.key == "k"
        assert entry.result.tasks[0].title == "Call mom"
        assert entry.result.usage == _result().usage

    def test_expired_entry_is_removed(self, clock):
        cache = ExtractionCache(ttl_seconds=3600, clock=clock)
        cache.set("k", _result())

        clock.advance(3601)

        assert cache.get("k") is None
        assert "k" not in cache
        assert len(cache) == 0

    def test_expires_exactly_at_ttl(self, clock):
        cache = ExtractionCache(ttl_seconds=10, clock=clock)
        cache.set("k", _result())
        clock.advance(10)
        assert cache.get("k") is None

    def test_capacity_evicts_oldest_inserted(self, clock):
        cache = ExtractionCache(max_size=3, clock=clock)
        for key in ("a", "b", "c"):
            cache.set(key, _result(key))
            clock.advance(1)

        cache.set("d", _result("d"))

        assert len(cache) == 3
        assert cache.get("a") is None
        for key in ("b", "c", "d"):
            assert cache.get(key) is not None

    def test_reads_do_not_protect_from_eviction(self, clock):
        """Eviction follows insertion order, not access order."""
        cache = ExtractionCache(max_size=2, clock=clock)
        cache.set("a", _result("a"))
        cache.set("b", _result("b"))
        for _ in range(5):
            assert cache.get("a") is not None

        cache.set("c", _result("c"))

        assert "a" not in cache
        assert "b" in cache
        assert "c" in cache

    def test_reinserting_key_refreshes_it(self, clock):
        cache = ExtractionCache(ttl_seconds=100, max_size=2, clock=clock)
        cache.set("a", _result("a"))
        cache.set("b", _result("b"))
        clock.advance(50)
        cache.set("a", _result("a2"))

        cache.set("c", _result("c"))
        clock.advance(60)

        assert "b" not in cache
        entry = cache.get("a")
        assert entry is not None
        assert entry.result.tasks[0].title == "a2"

    def test_zero_ttl_never_hits(self, clock):
        cache = ExtractionCache(ttl_seconds=0, clock=clock)
        cache.set("k", _result())
        assert cache.get("k") is None

    def test_zero_capacity_stores_nothing(self, clock):
        cache = ExtractionCache(max_size=0, clock=clock)
        cache.set("k", _result())
        assert len(cache) == 0
        assert cache.get("k") is None

    @pytest.mark.parametrize("kwargs", [{"ttl_seconds": -1}, {"max_size": -1}])
    def test_negative_limits_rejected(self, kwargs):
        with pytest.raises(ValueError):
            ExtractionCache(**kwargs)

    def test_clear(self, clock):
        cache = ExtractionCache(clock=clock)
        cache.set("a", _result())
        cache.set("b", _result())

        cache.clear()

        assert len(cache) == 0
        assert cache.get("a") is None

    def test_stored_result_is_isolated_from_caller(self, clock):
        cache = ExtractionCache(clock=clock)
        original = _result()
        cache.set("k", original)

        original.tasks[0].title = "Changed before read"
        first = cache.get("k")
        assert first is not None
        first.result.tasks.clear()

        second = cache.get("k")
        assert second is not None
        assert second.result.tasks[0].title == "Call mom"

    def test_defaults(self):
        cache = ExtractionCache()
        assert cache.ttl_seconds == 3600
        assert cache.max_size == 100

    def test_concurrent_set_and_get_respect_capacity(self):
        cache = ExtractionCache(max_size=8)
        start = threading.Barrier(6)
        result = _result()
        sizes: list[int] = []

        def worker(worker_id: int) -> None:
            start.wait()
            for i in range(300):
                key = f"k{(worker_id * 7 + i) % 40}"
                cache.set(key, result)
                entry = cache.get(key)
                if entry is not None:
                    assert entry.result.tasks[0].title == "Call mom"
                sizes.append(len(cache))

        with ThreadPoolExecutor(max_workers=6) as pool:
            futures = [pool.submit(worker, n) for n in range(6)]
            # Re-raises anything a worker raised
            for future in futures:
                future.result()

        assert len(sizes) == 6 * 300
        assert max(sizes) <= 8
        assert len(cache) <= 8
