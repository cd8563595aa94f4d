"""Constants for the LLM extraction layer.

Centralizes default values shared by the backend adapters, the cache
and the configuration loader.
"""

# =============================================================================
# Generation Defaults
# =============================================================================

# Applied when the caller leaves temperature unset.
DEFAULT_TEMPERATURE = 0.7

# Cap on the size of the backend reply (not of the input text).
DEFAULT_MAX_TOKENS = 2000

# =============================================================================
# Default Models
# =============================================================================

# Default model per backend; each must appear in that adapter's advertised list.
DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "claude": "claude-sonnet-4-20250514",
    "gemini": "gemini-2.0-flash",
}

# Sentinel provider meaning "AI extraction disabled".
NO_PROVIDER = "none"

# =============================================================================
# Cache Defaults
# =============================================================================

# Entries older than this are treated as absent (seconds).
DEFAULT_CACHE_TTL_SECONDS = 60 * 60

# Maximum number of cached extraction results.
DEFAULT_CACHE_MAX_SIZE = 100

# =============================================================================
# Connection Test
# =============================================================================

# Short brain dump used to verify that credentials and model work end to end.
CONNECTION_TEST_TEXT = "Call the dentist tomorrow. Drink water every morning."
