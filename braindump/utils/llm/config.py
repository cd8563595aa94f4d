"""AI configuration: which backend to use and how to call it.

Reads configuration from ~/.braindump/config.toml and environment variables.
Environment variables take precedence over config file values.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, cast

from braindump.models import ProviderName

from .constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODELS,
    DEFAULT_TEMPERATURE,
    NO_PROVIDER,
)

# Default config file location
DEFAULT_CONFIG_PATH = Path.home() / ".braindump" / "config.toml"

# Environment variables searched for a credential, per backend
API_KEY_ENV_VARS: dict[str, tuple[str, ...]] = {
    "openai": ("BRAINDUMP_OPENAI_API_KEY", "OPENAI_API_KEY"),
    "claude": ("BRAINDUMP_CLAUDE_API_KEY", "ANTHROPIC_API_KEY"),
    "gemini": ("BRAINDUMP_GEMINI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"),
}

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ExtractionTypes:
    """Which item categories the backend is asked to extract."""

    tasks: bool = True
    habits: bool = True
    events: bool = True
    sleep: bool = True

    def enabled(self) -> list[str]:
        """Return enabled category names in a stable order."""
        return [
            name
            for name, on in (
                ("tasks", self.tasks),
                ("habits", self.habits),
                ("events", self.events),
                ("sleep", self.sleep),
            )
            if on
        ]


@dataclass
class AISettings:
    """The user's AI configuration record. Never mutated by the extraction layer."""

    provider: ProviderName = "none"
    api_key: str = ""
    model: str = ""
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    enable_cache: bool = True
    timeout: Optional[float] = None  # Passed to the SDK client only when set
    extraction: ExtractionTypes = field(default_factory=ExtractionTypes)

    @property
    def resolved_model(self) -> str:
        """Return the configured model, or the backend's default when unset."""
        return self.model or DEFAULT_MODELS.get(self.provider, "")

    def is_configured(self) -> bool:
        """True when a backend is selected and a non-blank credential is set."""
        return self.provider != NO_PROVIDER and bool(self.api_key.strip())


def _load_toml(path: Path) -> dict:
    """Load and parse a TOML configuration file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dict, or empty dict if file doesn't exist.
    """
    if not path.exists():
        return {}

    import tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def normalize_provider(value: str) -> ProviderName:
    """Validate and normalize a provider name string.

    Args:
        value: Provider name string (case-insensitive).

    Returns:
        Validated provider name. Unknown values become "none" so that a typo
        disables AI instead of silently picking another backend.
    """
    value = value.lower().strip()
    if value in ("openai", "claude", "gemini"):
        return cast(ProviderName, value)
    if value == "anthropic":
        return "claude"
    return "none"


def _as_bool(value: Any, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _clamp_temperature(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def _resolve_api_key(provider: str, section: dict, env: Mapping[str, str]) -> str:
    for var in API_KEY_ENV_VARS.get(provider, ()):
        value = env.get(var)
        if value:
            return value
    backend_section = section.get(provider, {})
    if isinstance(backend_section, dict) and backend_section.get("api_key"):
        return str(backend_section["api_key"])
    return str(section.get("api_key", ""))


def load_ai_settings(
    config_path: Optional[Path] = None,
    provider_override: Optional[str] = None,
    include_env: bool = True,
) -> AISettings:
    """Load AI settings from file and environment.

    Configuration sources (in order of precedence):
    0. ``provider_override`` (provider only)
    1. Environment variables (BRAINDUMP_AI_*, provider API key variables)
    2. Config file (~/.braindump/config.toml)
    3. Default values

    Args:
        config_path: Optional path to config file. Defaults to ~/.braindump/config.toml.
        provider_override: Provider chosen by the caller (e.g. a CLI flag);
            wins over environment and file.
        include_env: If False, only the file and defaults are read, e.g.
            when the result is about to be written back to the file.

    Returns:
        AISettings with merged configuration.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    file_config = _load_toml(path)
    section = file_config.get("ai", {})
    env: Mapping[str, str] = os.environ if include_env else {}

    provider = normalize_provider(
        provider_override
        or env.get("BRAINDUMP_AI_PROVIDER")
        or section.get("provider", NO_PROVIDER)
    )

    model = env.get("BRAINDUMP_AI_MODEL") or section.get("model", "")
    temperature = _clamp_temperature(
        float(
            env.get("BRAINDUMP_AI_TEMPERATURE")
            or section.get("temperature", DEFAULT_TEMPERATURE)
        )
    )
    max_tokens = int(
        env.get("BRAINDUMP_AI_MAX_TOKENS")
        or section.get("max_tokens", DEFAULT_MAX_TOKENS)
    )
    enable_cache = _as_bool(
        env.get("BRAINDUMP_AI_ENABLE_CACHE", section.get("enable_cache")),
        default=True,
    )
    raw_timeout = env.get("BRAINDUMP_AI_TIMEOUT") or section.get("timeout")
    timeout = float(raw_timeout) if raw_timeout else None

    extraction_section = section.get("extraction", {})
    extraction = ExtractionTypes(
        tasks=_as_bool(extraction_section.get("tasks"), True),
        habits=_as_bool(extraction_section.get("habits"), True),
        events=_as_bool(extraction_section.get("events"), True),
        sleep=_as_bool(extraction_section.get("sleep"), True),
    )

    return AISettings(
        provider=provider,
        api_key=_resolve_api_key(provider, section, env) if provider != NO_PROVIDER else "",
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        enable_cache=enable_cache,
        timeout=timeout,
        extraction=extraction,
    )


def get_example_config() -> str:
    """Return example config.toml content with documented options.

    Returns:
        Multi-line string containing a complete example TOML configuration
        with comments explaining each option.
    """
    return """# Brain Dump AI - Configuration
# Place this file at ~/.braindump/config.toml

[ai]
# Available providers: "openai", "claude", "gemini", "none"
provider = "none"
# API key (or set OPENAI_API_KEY / ANTHROPIC_API_KEY / GEMINI_API_KEY)
api_key = ""
# Leave empty for the provider's default model
model = ""
temperature = 0.7
max_tokens = 2000
enable_cache = true
# timeout = 30.0  # Optional request timeout in seconds

[ai.extraction]
tasks = true
habits = true
events = true
sleep = true
"""


def save_ai_settings(settings: AISettings, config_path: Optional[Path] = None) -> None:
    """Write AI settings to a TOML file with secure permissions.

    Args:
        settings: Settings to persist.
        config_path: Optional path to config file. Defaults to ~/.braindump/config.toml.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    def _flag(value: bool) -> str:
        return str(value).lower()

    lines = [
        "# Brain Dump AI - Configuration",
        "",
        "[ai]",
        f'provider = "{settings.provider}"',
        f'api_key = "{settings.api_key}"',
        f'model = "{settings.model}"',
        f"temperature = {settings.temperature}",
        f"max_tokens = {settings.max_tokens}",
        f"enable_cache = {_flag(settings.enable_cache)}",
    ]
    if settings.timeout is not None:
        lines.append(f"timeout = {settings.timeout}")
    lines.extend(
        [
            "",
            "[ai.extraction]",
            f"tasks = {_flag(settings.extraction.tasks)}",
            f"habits = {_flag(settings.extraction.habits)}",
            f"events = {_flag(settings.extraction.events)}",
            f"sleep = {_flag(settings.extraction.sleep)}",
        ]
    )

    path.write_text("\n".join(lines) + "\n")

    # Owner read/write only: the file holds an API key
    os.chmod(path, 0o600)
