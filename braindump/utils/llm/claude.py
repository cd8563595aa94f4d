"""Claude extraction backend using the anthropic SDK."""

import logging
from typing import Any, Optional

from braindump.models import ExtractionResult, ModelInfo, TokenUsage

from .errors import ConfigurationError, ParseError, map_backend_error
from .normalize import build_result
from .prompts import build_prompt
from .provider import BackendAdapter, GenerationOptions, check_request

logger = logging.getLogger(__name__)

CLAUDE_MODELS = [
    ModelInfo(
        id="claude-sonnet-4-20250514",
        name="Claude Sonnet 4 (Recommended)",
        description="Balances quality, cost and speed",
        max_tokens=200000,
    ),
    ModelInfo(
        id="claude-opus-4-20250514",
        name="Claude Opus 4",
        description="Most capable, slower and more expensive",
        max_tokens=200000,
    ),
    ModelInfo(
        id="claude-3-5-haiku-20241022",
        name="Claude 3.5 Haiku",
        description="Fast and efficient",
        max_tokens=200000,
    ),
]


class ClaudeAdapter(BackendAdapter):
    """Extraction backend for Anthropic Claude models.

    Claude tends to wrap JSON in explanation text, which the shared
    payload locator strips.
    """

    @property
    def name(self) -> str:
        """Return backend name."""
        return "claude"

    @property
    def label(self) -> str:
        return "Claude"

    def get_available_models(self) -> list[ModelInfo]:
        return list(CLAUDE_MODELS)

    def _create_client(self, api_key: str, timeout: Optional[float]) -> Any:
        """Create an async Anthropic client for one credential."""
        try:
            import anthropic
        except ImportError as exc:
            raise ConfigurationError(
                "anthropic package is required for the Claude backend. "
                "Install with: pip install anthropic",
                provider=self.name,
                original_error=exc,
            ) from exc

        kwargs: dict[str, Any] = {"api_key": api_key}
        if timeout is not None:
            kwargs["timeout"] = timeout
        return anthropic.AsyncAnthropic(**kwargs)

    async def process_text(
        self,
        text: str,
        api_key: str,
        model: str,
        options: Optional[GenerationOptions] = None,
    ) -> ExtractionResult:
        options = options or GenerationOptions()
        check_request(self, api_key, model)
        prompt = build_prompt(text, self.name, options.extraction_types, options.today)
        client = self._create_client(api_key, options.timeout)

        logger.debug("Claude request: model=%s chars=%d", model, len(text))
        try:
            message = await client.messages.create(
                model=model,
                max_tokens=options.resolved_max_tokens(),
                temperature=options.resolved_temperature(),
                system=prompt.system,
                messages=[
                    {
                        "role": "user",
                        "content": f"{prompt.user}\n\nPlease respond with valid JSON only.",
                    }
                ],
            )
        except Exception as e:
            error = map_backend_error(self.name, self.label, e)
            logger.warning("Claude request failed: %s: %s", type(e).__name__, error)
            raise error from e
        finally:
            await client.close()

        text_blocks = [
            block.text
            for block in (message.content or [])
            if getattr(block, "type", None) == "text"
        ]
        if not text_blocks:
            raise ParseError("Unexpected response type from Claude", provider=self.name)

        usage = None
        if message.usage is not None:
            usage = TokenUsage(
                prompt_tokens=message.usage.input_tokens,
                completion_tokens=message.usage.output_tokens,
                total_tokens=message.usage.input_tokens + message.usage.output_tokens,
            )

        return build_result(
            self.name, self.label, "".join(text_blocks), usage, options.extraction_types
        )
