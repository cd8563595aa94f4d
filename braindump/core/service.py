"""Extraction service: the single entry point for turning brain dumps into items."""

import logging
from dataclasses import replace
from datetime import date
from typing import Mapping, Optional

from braindump.models import ExtractionResult, ModelInfo
from braindump.utils.llm import (
    AISettings,
    BackendAdapter,
    ConfigurationError,
    ExtractionError,
    GenerationOptions,
    UnknownError,
    default_adapters,
)
from braindump.utils.llm.constants import CONNECTION_TEST_TEXT, NO_PROVIDER

from .cache import ExtractionCache, make_fingerprint

logger = logging.getLogger(__name__)


class ExtractionService:
    """Selects a backend, consults the cache, and runs extractions.

    Holds its cache for its whole lifetime. Failures propagate unchanged in
    kind: no retries, no fallback to another backend, and no merging of
    identical requests that are in flight at the same time.
    """

    def __init__(
        self,
        cache: Optional[ExtractionCache] = None,
        adapters: Optional[Mapping[str, BackendAdapter]] = None,
    ) -> None:
        self._cache = cache if cache is not None else ExtractionCache()
        self._adapters = dict(adapters) if adapters is not None else default_adapters()

    @property
    def cache(self) -> ExtractionCache:
        return self._cache

    def _resolve_adapter(self, provider: str) -> BackendAdapter:
        adapter = self._adapters.get(provider)
        if adapter is None:
            raise ConfigurationError(f"Unknown AI provider: {provider}", provider=provider)
        return adapter

    async def process_text(
        self,
        text: str,
        settings: AISettings,
        today: Optional[date] = None,
    ) -> ExtractionResult:
        """Extract tasks, habits, events and sleep schedules from text.

        Args:
            text: Raw brain dump text, any length.
            settings: The user's AI configuration (read only).
            today: Reference date for relative phrases; defaults to today.

        Returns:
            ExtractionResult owned by the caller.

        Raises:
            ExtractionError: ConfigurationError before any network call when
                no backend or credential is configured; otherwise whatever
                kind the adapter reported.
        """
        if not settings.is_configured():
            raise ConfigurationError(
                "AI processing is not configured. Please configure an AI provider "
                "in settings.",
                provider=settings.provider,
            )

        adapter = self._resolve_adapter(settings.provider)
        model = settings.resolved_model

        key = None
        if settings.enable_cache:
            key = make_fingerprint(
                text,
                settings.provider,
                model,
                settings.temperature,
                settings.max_tokens,
                settings.extraction,
            )
            entry = self._cache.get(key)
            if entry is not None:
                logger.info("Using cached AI response (%s)", settings.provider)
                return entry.result

        options = GenerationOptions(
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            extraction_types=settings.extraction,
            today=today,
            timeout=settings.timeout,
        )
        try:
            result = await adapter.process_text(text, settings.api_key, model, options)
        except ExtractionError:
            raise
        except Exception as e:
            logger.exception("Unexpected failure in %s adapter", settings.provider)
            raise UnknownError(
                f"AI processing failed: {e}",
                provider=settings.provider,
                original_error=e,
            ) from e

        logger.info(
            "Extracted %s via %s/%s", result.counts(), settings.provider, model
        )
        if key is not None:
            self._cache.set(key, result)
        return result

    async def test_connection(self, settings: AISettings) -> tuple[bool, str]:
        """Run a short sample extraction, bypassing the cache.

        Returns:
            Tuple of (success, human-readable message).
        """
        uncached = replace(settings, enable_cache=False)
        try:
            result = await self.process_text(CONNECTION_TEST_TEXT, uncached)
        except ExtractionError as e:
            return False, e.message
        counts = result.counts()
        return True, (
            f"Connection successful! Extracted {counts['tasks']} tasks and "
            f"{counts['habits']} habits."
        )

    def clear_cache(self) -> None:
        """Drop every cached extraction result."""
        self._cache.clear()

    def get_available_models(self, provider: str) -> list[ModelInfo]:
        """Return the models a backend advertises; empty for "none".

        Raises:
            ConfigurationError: If the backend is unknown.
        """
        if provider == NO_PROVIDER:
            return []
        return self._resolve_adapter(provider).get_available_models()
