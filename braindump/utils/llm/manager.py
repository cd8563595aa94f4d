"""Backend registry: look up extraction adapters by configured identity."""

from typing import Callable

from .claude import ClaudeAdapter
from .errors import ConfigurationError
from .gemini import GeminiAdapter
from .openai import OpenAIAdapter
from .provider import BackendAdapter

# Factories keyed by backend name; SDKs are only imported when a client is built.
ADAPTER_FACTORIES: dict[str, Callable[[], BackendAdapter]] = {
    "openai": OpenAIAdapter,
    "claude": ClaudeAdapter,
    "gemini": GeminiAdapter,
}


def default_adapters() -> dict[str, BackendAdapter]:
    """Instantiate one adapter per supported backend."""
    return {name: factory() for name, factory in ADAPTER_FACTORIES.items()}


def get_adapter(name: str) -> BackendAdapter:
    """Return a fresh adapter for a backend name.

    Raises:
        ConfigurationError: If the backend is not supported.
    """
    factory = ADAPTER_FACTORIES.get(name)
    if factory is None:
        raise ConfigurationError(
            f"Unknown AI provider: {name!r}. Supported: {', '.join(ADAPTER_FACTORIES)}",
            provider=name,
        )
    return factory()
