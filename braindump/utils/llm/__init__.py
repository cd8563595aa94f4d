"""Multi-backend LLM extraction layer for Brain Dump AI.

Turns free text into tasks, habits, calendar events and sleep schedules via
interchangeable backends (OpenAI, Claude, Gemini) behind one contract:

    adapter.process_text(text, api_key, model, options) -> ExtractionResult

Pipeline per request:
    build_prompt -> one backend call -> locate JSON payload -> validate
    -> translate into domain models

Every failure surfaces as an ExtractionError subclass:
    ConfigurationError, AuthenticationError, RateLimitError, ServiceError,
    ParseError, ValidationError, UnknownError

Configuration:
    Set BRAINDUMP_AI_PROVIDER / provider API key env vars, or configure
    ~/.braindump/config.toml:

    [ai]
    provider = "openai"
    api_key = "your-api-key"
    model = "gpt-4o-mini"
    temperature = 0.7
    max_tokens = 2000
    enable_cache = true
"""

from .config import AISettings, ExtractionTypes, load_ai_settings, save_ai_settings
from .errors import (
    AuthenticationError,
    ConfigurationError,
    ExtractionError,
    ParseError,
    RateLimitError,
    ServiceError,
    UnknownError,
    ValidationError,
)
from .manager import ADAPTER_FACTORIES, default_adapters, get_adapter
from .prompts import build_prompt, preprocess_brain_dump
from .provider import BackendAdapter, GenerationOptions
from .validator import validate_extraction_payload

__all__ = [
    # Contract
    "BackendAdapter",
    "GenerationOptions",
    "ADAPTER_FACTORIES",
    "default_adapters",
    "get_adapter",
    # Prompting and validation
    "build_prompt",
    "preprocess_brain_dump",
    "validate_extraction_payload",
    # Config
    "AISettings",
    "ExtractionTypes",
    "load_ai_settings",
    "save_ai_settings",
    # Errors
    "ExtractionError",
    "ConfigurationError",
    "AuthenticationError",
    "RateLimitError",
    "ServiceError",
    "ParseError",
    "ValidationError",
    "UnknownError",
]
