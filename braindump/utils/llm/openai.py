"""OpenAI extraction backend using the openai SDK."""

import logging
from typing import Any, Optional

from braindump.models import ExtractionResult, ModelInfo, TokenUsage

from .errors import ConfigurationError, map_backend_error
from .normalize import build_result
from .prompts import build_prompt
from .provider import BackendAdapter, GenerationOptions, check_request

logger = logging.getLogger(__name__)

OPENAI_MODELS = [
    ModelInfo(
        id="gpt-4o-mini",
        name="GPT-4o mini (Recommended)",
        description="Fast and cost-effective, good at structured output",
        max_tokens=128000,
    ),
    ModelInfo(
        id="gpt-4o",
        name="GPT-4o",
        description="High quality multimodal flagship",
        max_tokens=128000,
    ),
    ModelInfo(
        id="gpt-4-turbo",
        name="GPT-4 Turbo",
        description="Previous generation, 128k context",
        max_tokens=128000,
    ),
    ModelInfo(
        id="gpt-3.5-turbo",
        name="GPT-3.5 Turbo",
        description="Legacy, fastest and cheapest",
        max_tokens=16385,
    ),
]


class OpenAIAdapter(BackendAdapter):
    """Extraction backend for OpenAI chat models.

    Uses the async openai client with JSON mode, so replies are usually bare
    JSON; they still go through the same locate/validate pipeline.
    """

    def __init__(self, base_url: str | None = None) -> None:
        """Initialize OpenAI adapter.

        Args:
            base_url: Optional custom base URL (for Azure or compatible endpoints).
        """
        self._base_url = base_url

    @property
    def name(self) -> str:
        """Return backend name."""
        return "openai"

    @property
    def label(self) -> str:
        return "OpenAI"

    def get_available_models(self) -> list[ModelInfo]:
        return list(OPENAI_MODELS)

    def _create_client(self, api_key: str, timeout: Optional[float]) -> Any:
        """Create an async OpenAI client for one credential."""
        try:
            from openai import AsyncOpenAI
        except ImportError as exc:
            raise ConfigurationError(
                "openai package is required for the OpenAI backend. "
                "Install with: pip install openai",
                provider=self.name,
                original_error=exc,
            ) from exc

        kwargs: dict[str, Any] = {"api_key": api_key}
        if timeout is not None:
            kwargs["timeout"] = timeout
        if self._base_url:
            kwargs["base_url"] = self._base_url
        return AsyncOpenAI(**kwargs)

    async def process_text(
        self,
        text: str,
        api_key: str,
        model: str,
        options: Optional[GenerationOptions] = None,
    ) -> ExtractionResult:
        """Extract entities using an OpenAI chat completion.

        Args:
            text: Raw brain dump text.
            api_key: OpenAI API key.
            model: One of OPENAI_MODELS ids.
            options: Generation options.

        Returns:
            Normalized ExtractionResult.
        """
        options = options or GenerationOptions()
        check_request(self, api_key, model)
        prompt = build_prompt(text, self.name, options.extraction_types, options.today)
        client = self._create_client(api_key, options.timeout)

        logger.debug("OpenAI request: model=%s chars=%d", model, len(text))
        try:
            completion = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": prompt.system},
                    {"role": "user", "content": prompt.user},
                ],
                temperature=options.resolved_temperature(),
                max_tokens=options.resolved_max_tokens(),
                response_format={"type": "json_object"},
            )
        except Exception as e:
            error = map_backend_error(self.name, self.label, e)
            logger.warning("OpenAI request failed: %s: %s", type(e).__name__, error)
            raise error from e
        finally:
            # One client per request; release its connection pool
            await client.close()

        content = ""
        if completion.choices and completion.choices[0].message.content:
            content = completion.choices[0].message.content

        usage = None
        if completion.usage is not None:
            usage = TokenUsage(
                prompt_tokens=completion.usage.prompt_tokens,
                completion_tokens=completion.usage.completion_tokens,
                total_tokens=completion.usage.total_tokens,
            )

        return build_result(self.name, self.label, content, usage, options.extraction_types)
