"""Gemini extraction backend using the google-genai SDK."""

import logging
from typing import Any, Optional

from braindump.models import ExtractionResult, ModelInfo, TokenUsage

from .errors import ConfigurationError, UnknownError, map_backend_error
from .normalize import build_result
from .prompts import build_prompt
from .provider import BackendAdapter, GenerationOptions, check_request

logger = logging.getLogger(__name__)

GEMINI_MODELS = [
    ModelInfo(
        id="gemini-2.0-flash",
        name="Gemini 2.0 Flash (Recommended)",
        description="Fast, capable, free tier available",
        max_tokens=1048576,
    ),
    ModelInfo(
        id="gemini-1.5-pro",
        name="Gemini 1.5 Pro",
        description="Best for long, complex brain dumps",
        max_tokens=2097152,
    ),
    ModelInfo(
        id="gemini-1.5-flash",
        name="Gemini 1.5 Flash",
        description="Previous generation fast model",
        max_tokens=1048576,
    ),
]


class GeminiAdapter(BackendAdapter):
    """Extraction backend for Google Gemini models.

    Uses the google-genai SDK's async surface (``client.aio``).
    """

    @property
    def name(self) -> str:
        """Return backend name."""
        return "gemini"

    @property
    def label(self) -> str:
        return "Gemini"

    def get_available_models(self) -> list[ModelInfo]:
        return list(GEMINI_MODELS)

    def _create_client(self, api_key: str, timeout: Optional[float]) -> Any:
        """Create a Gemini client for one credential."""
        try:
            from google import genai
        except ImportError as exc:
            raise ConfigurationError(
                "google-genai package is required for the Gemini backend. "
                "Install with: pip install google-genai",
                provider=self.name,
                original_error=exc,
            ) from exc

        kwargs: dict[str, Any] = {"api_key": api_key}
        if timeout is not None:
            # google-genai takes the HTTP timeout in milliseconds
            kwargs["http_options"] = {"timeout": int(timeout * 1000)}
        return genai.Client(**kwargs)

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

        logger.debug("Gemini request: model=%s chars=%d", model, len(text))
        try:
            response = await client.aio.models.generate_content(
                model=model,
                contents=prompt.user,
                config={
                    "system_instruction": prompt.system,
                    "temperature": options.resolved_temperature(),
                    "max_output_tokens": options.resolved_max_tokens(),
                    "response_mime_type": "application/json",
                },
            )
        except Exception as e:
            error = map_backend_error(self.name, self.label, e)
            logger.warning("Gemini request failed: %s: %s", type(e).__name__, error)
            raise error from e
        finally:
            await client.aio.aclose()

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise UnknownError(
                "Content was blocked by Gemini safety filters. "
                "Please rephrase your input.",
                provider=self.name,
                status_code=400,
            )

        usage = None
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            prompt_tokens = metadata.prompt_token_count or 0
            completion_tokens = metadata.candidates_token_count or 0
            usage = TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=metadata.total_token_count or prompt_tokens + completion_tokens,
            )

        return build_result(
            self.name, self.label, response.text or "", usage, options.extraction_types
        )
