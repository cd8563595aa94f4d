"""Abstract contract for extraction backends."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from braindump.models import ExtractionResult, ModelInfo

from .config import ExtractionTypes
from .constants import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationOptions:
    """Per-request generation options.

    ``temperature`` and ``max_tokens`` fall back to backend defaults when None.
    ``timeout`` is handed to the SDK client only when set; adapters add no
    timeout of their own.
    """

    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    extraction_types: ExtractionTypes = field(default_factory=ExtractionTypes)
    today: Optional[date] = None
    timeout: Optional[float] = None

    def resolved_temperature(self) -> float:
        return DEFAULT_TEMPERATURE if self.temperature is None else self.temperature

    def resolved_max_tokens(self) -> int:
        return DEFAULT_MAX_TOKENS if self.max_tokens is None else self.max_tokens


class BackendAdapter(ABC):
    """Contract every extraction backend implements.

    An adapter owns its backend's request shaping, reply decoding and
    error-code mapping. Whatever the backend, ``process_text`` returns an
    ExtractionResult or raises an ExtractionError subclass.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the backend identity used in configuration (e.g. 'openai')."""
        ...

    @property
    @abstractmethod
    def label(self) -> str:
        """Return the human-readable backend name used in messages."""
        ...

    @abstractmethod
    def get_available_models(self) -> list[ModelInfo]:
        """Return the model identifiers this backend accepts."""
        ...

    @abstractmethod
    async def process_text(
        self,
        text: str,
        api_key: str,
        model: str,
        options: Optional[GenerationOptions] = None,
    ) -> ExtractionResult:
        """Extract domain entities from raw brain dump text.

        Performs exactly one backend request.

        Args:
            text: Raw brain dump text.
            api_key: Backend credential; must be non-empty.
            model: One of ``get_available_models()`` ids.
            options: Generation options; backend defaults when None.

        Returns:
            Normalized ExtractionResult.

        Raises:
            ExtractionError: One of the closed taxonomy subclasses.
        """
        ...


def check_request(adapter: BackendAdapter, api_key: str, model: str) -> None:
    """Reject requests that cannot succeed, before any client is created.

    Raises:
        ConfigurationError: Missing credential or unadvertised model.
    """
    if not api_key or not api_key.strip():
        raise ConfigurationError(
            f"{adapter.label} API key is not configured", provider=adapter.name
        )
    known = [info.id for info in adapter.get_available_models()]
    if model not in known:
        raise ConfigurationError(
            f"Unknown {adapter.label} model {model!r}. Available: {', '.join(known)}",
            provider=adapter.name,
        )
