"""Closed error taxonomy for extraction failures.

Every backend adapter normalizes its wire-level failures into one of these
kinds before they leave the adapter, so callers never need to know which SDK
raised what.
"""

from typing import Any, Optional


class ExtractionError(Exception):
    """Base class for all extraction failures.

    Attributes:
        provider: Backend name that produced the failure ("none" for config).
        status_code: HTTP-equivalent status reported by the backend, if any.
        original_error: The underlying exception, kept for diagnostics.
    """

    kind = "unknown"

    def __init__(
        self,
        message: str,
        provider: str = "none",
        status_code: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.original_error = original_error

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(provider={self.provider!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


class ConfigurationError(ExtractionError):
    """No backend selected, missing credential, or unknown model."""

    kind = "configuration"


class AuthenticationError(ExtractionError):
    """The backend rejected the credential."""

    kind = "authentication"


class RateLimitError(ExtractionError):
    """The backend signaled throttling; the caller may wait and retry."""

    kind = "rate_limit"


class ServiceError(ExtractionError):
    """Backend-side transient failure (5xx)."""

    kind = "service"


class ParseError(ExtractionError):
    """The reply held no locatable JSON payload, or it failed to decode."""

    kind = "parse"


class ValidationError(ExtractionError):
    """The payload decoded but does not match the extraction schema."""

    kind = "validation"

    def __init__(
        self,
        message: str,
        provider: str = "none",
        problems: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, provider=provider, **kwargs)
        self.problems = problems or []


class UnknownError(ExtractionError):
    """Any other backend failure; the backend's message is preserved."""

    kind = "unknown"


def status_of(exc: BaseException) -> Optional[int]:
    """Return the HTTP status carried by an SDK exception, if any.

    openai and anthropic expose ``status_code``; google-genai exposes ``code``.
    """
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def map_backend_error(provider: str, label: str, exc: BaseException) -> ExtractionError:
    """Translate an SDK exception into the closed taxonomy.

    Args:
        provider: Backend name (e.g. "openai").
        label: Human-readable backend name used in messages (e.g. "OpenAI").
        exc: The exception raised by the backend client.

    Returns:
        The matching ExtractionError subclass instance.
    """
    status = status_of(exc)
    if status in (401, 403):
        return AuthenticationError(
            f"Invalid {label} API key", provider, status, exc
        )
    if status == 429:
        return RateLimitError(
            f"{label} rate limit exceeded. Please try again later.",
            provider,
            status,
            exc,
        )
    if status is not None and status >= 500:
        return ServiceError(
            f"{label} service error. Please try again.", provider, status, exc
        )
    detail = str(exc) or type(exc).__name__
    return UnknownError(f"{label} error: {detail}", provider, status, exc)
