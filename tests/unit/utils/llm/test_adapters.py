"""Tests for the OpenAI, Claude and Gemini extraction backends.

The SDK clients are replaced with fakes through each adapter's
``_create_client`` so no network access or API key is needed.
"""

import json
from datetime import date
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from braindump.utils.llm import (
    AuthenticationError,
    ConfigurationError,
    ExtractionTypes,
    GenerationOptions,
    ParseError,
    RateLimitError,
    ServiceError,
    UnknownError,
    ValidationError,
    get_adapter,
)
from braindump.utils.llm.claude import ClaudeAdapter
from braindump.utils.llm.gemini import GeminiAdapter
from braindump.utils.llm.openai import OpenAIAdapter

TODAY = date(2026, 10, 17)


class FakeAPIError(Exception):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


def _client() -> MagicMock:
    """SDK client double whose close methods can be awaited."""
    client = MagicMock()
    client.close = AsyncMock()
    client.aio.aclose = AsyncMock()
    return client


def _openai_client(content: str | None, usage: Any = None) -> MagicMock:
    completion = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=usage,
    )
    client = _client()
    client.chat.completions.create = AsyncMock(return_value=completion)
    return client


def _claude_client(blocks: list[Any], usage: Any = None) -> MagicMock:
    message = SimpleNamespace(content=blocks, usage=usage)
    client = _client()
    client.messages.create = AsyncMock(return_value=message)
    return client


def _gemini_client(text: str | None, usage: Any = None, feedback: Any = None) -> MagicMock:
    response = SimpleNamespace(text=text, usage_metadata=usage, prompt_feedback=feedback)
    client = _client()
    client.aio.models.generate_content = AsyncMock(return_value=response)
    return client


def _install(monkeypatch: pytest.MonkeyPatch, adapter: Any, client: Any) -> list[tuple]:
    """Make the adapter hand out ``client`` and record how it was created."""
    created: list[tuple] = []

    def fake_create_client(api_key: str, timeout: Any) -> Any:
        created.append((api_key, timeout))
        return client

    monkeypatch.setattr(adapter, "_create_client", fake_create_client)
    return created


def _options(**kwargs: Any) -> GenerationOptions:
    return GenerationOptions(today=TODAY, **kwargs)


class TestRequestChecks:
    """Requests that cannot succeed fail before any client is built."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("adapter_cls", [OpenAIAdapter, ClaudeAdapter, GeminiAdapter])
    @pytest.mark.parametrize("api_key", ["", "   "])
    async def test_missing_key(self, monkeypatch, adapter_cls, api_key):
        adapter = adapter_cls()
        created = _install(monkeypatch, adapter, _client())
        model = adapter.get_available_models()[0].id

        with pytest.raises(ConfigurationError) as exc_info:
            await adapter.process_text("Call mom", api_key, model)

        assert exc_info.value.provider == adapter.name
        assert "API key is not configured" in exc_info.value.message
        assert created == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("adapter_cls", [OpenAIAdapter, ClaudeAdapter, GeminiAdapter])
    async def test_unknown_model(self, monkeypatch, adapter_cls):
        adapter = adapter_cls()
        created = _install(monkeypatch, adapter, _client())

        with pytest.raises(ConfigurationError, match="Unknown"):
            await adapter.process_text("Call mom", "key", "not-a-model")

        assert created == []


class TestModelLists:
    @pytest.mark.parametrize(
        "name,default",
        [
            ("openai", "gpt-4o-mini"),
            ("claude", "claude-sonnet-4-20250514"),
            ("gemini", "gemini-2.0-flash"),
        ],
    )
    def test_default_model_is_advertised(self, name, default):
        ids = [info.id for info in get_adapter(name).get_available_models()]
        assert ids[0] == default
        assert len(ids) == len(set(ids))

    def test_get_adapter_unknown(self):
        with pytest.raises(ConfigurationError):
            get_adapter("ollama")

    def test_returned_list_is_a_copy(self):
        adapter = OpenAIAdapter()
        adapter.get_available_models().clear()
        assert adapter.get_available_models()


class TestOpenAIAdapter:
    @pytest.mark.asyncio
    async def test_success(self, monkeypatch, valid_payload):
        adapter = OpenAIAdapter()
        usage = SimpleNamespace(prompt_tokens=120, completion_tokens=80, total_tokens=200)
        client = _openai_client(json.dumps(valid_payload), usage)
        created = _install(monkeypatch, adapter, client)

        result = await adapter.process_text(
            "Call mom tomorrow",
            "sk-test",
            "gpt-4o",
            _options(temperature=0.2, max_tokens=500, timeout=30.0),
        )

        assert created == [("sk-test", 30.0)]
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 500
        assert kwargs["response_format"] == {"type": "json_object"}
        assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]
        assert "Call mom tomorrow." in kwargs["messages"][1]["content"]

        assert [t.title for t in result.tasks] == ["Call mom"]
        assert result.tasks[0].time_estimate == "15min"
        assert result.usage is not None
        assert result.usage.total_tokens == 200
        assert json.loads(result.raw_response) == valid_payload
        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_defaults_used_when_options_omitted(self, monkeypatch, valid_payload):
        adapter = OpenAIAdapter()
        client = _openai_client(json.dumps(valid_payload))
        _install(monkeypatch, adapter, client)

        result = await adapter.process_text("x", "sk-test", "gpt-4o-mini")

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 2000
        assert result.usage is None

    @pytest.mark.asyncio
    async def test_zero_temperature_is_kept(self, monkeypatch, valid_payload):
        adapter = OpenAIAdapter()
        client = _openai_client(json.dumps(valid_payload))
        _install(monkeypatch, adapter, client)

        await adapter.process_text("x", "sk-test", "gpt-4o-mini", _options(temperature=0.0))

        assert client.chat.completions.create.await_args.kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_ids_are_fresh(self, monkeypatch, valid_payload):
        adapter = OpenAIAdapter()
        _install(monkeypatch, adapter, _openai_client(json.dumps(valid_payload)))

        result = await adapter.process_text("x", "sk-test", "gpt-4o-mini", _options())

        ids = [
            result.tasks[0].id,
            result.habits[0].id,
            result.events[0].id,
            result.sleep_schedules[0].id,
        ]
        assert not any(i.startswith("model-") for i in ids)
        assert len(set(ids)) == 4

    @pytest.mark.asyncio
    async def test_empty_content_is_parse_error(self, monkeypatch):
        adapter = OpenAIAdapter()
        _install(monkeypatch, adapter, _openai_client(None))

        with pytest.raises(ParseError, match="Could not find JSON in OpenAI response"):
            await adapter.process_text("x", "sk-test", "gpt-4o-mini", _options())

    @pytest.mark.asyncio
    async def test_invalid_priority_is_validation_error(self, monkeypatch, valid_payload):
        valid_payload["tasks"][0]["priority"] = "urgent"
        adapter = OpenAIAdapter()
        _install(monkeypatch, adapter, _openai_client(json.dumps(valid_payload)))

        with pytest.raises(ValidationError) as exc_info:
            await adapter.process_text("x", "sk-test", "gpt-4o-mini", _options())

        assert exc_info.value.message.startswith("Invalid response format from OpenAI")
        assert exc_info.value.provider == "openai"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,expected",
        [
            (401, AuthenticationError),
            (429, RateLimitError),
            (502, ServiceError),
            (400, UnknownError),
        ],
    )
    async def test_backend_errors_are_mapped(self, monkeypatch, status, expected):
        adapter = OpenAIAdapter()
        client = _client()
        original = FakeAPIError("backend said no", status)
        client.chat.completions.create = AsyncMock(side_effect=original)
        _install(monkeypatch, adapter, client)

        with pytest.raises(expected) as exc_info:
            await adapter.process_text("x", "sk-test", "gpt-4o-mini", _options())

        assert exc_info.value.status_code == status
        assert exc_info.value.original_error is original
        client.close.assert_awaited_once()


class TestClaudeAdapter:
    @pytest.mark.asyncio
    async def test_success_with_prose_wrapped_reply(self, monkeypatch, valid_reply):
        adapter = ClaudeAdapter()
        usage = SimpleNamespace(input_tokens=300, output_tokens=150)
        client = _claude_client([SimpleNamespace(type="text", text=valid_reply)], usage)
        _install(monkeypatch, adapter, client)

        result = await adapter.process_text(
            "Dentist on Tuesday at 9",
            "sk-ant-test",
            "claude-sonnet-4-20250514",
            _options(),
        )

        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["model"] == "claude-sonnet-4-20250514"
        assert kwargs["system"].startswith("You are")
        assert kwargs["messages"][0]["role"] == "user"
        assert kwargs["messages"][0]["content"].endswith(
            "Please respond with valid JSON only."
        )

        assert result.events[0].title == "Dentist"
        assert result.events[0].end_time > result.events[0].start_time
        assert result.usage is not None
        assert result.usage.prompt_tokens == 300
        assert result.usage.total_tokens == 450
        assert result.raw_response == valid_reply
        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_non_text_reply_is_parse_error(self, monkeypatch):
        adapter = ClaudeAdapter()
        client = _claude_client([SimpleNamespace(type="tool_use", input={})])
        _install(monkeypatch, adapter, client)

        with pytest.raises(ParseError, match="Unexpected response type from Claude"):
            await adapter.process_text(
                "x", "sk-ant-test", "claude-sonnet-4-20250514", _options()
            )

    @pytest.mark.asyncio
    async def test_disabled_categories_are_dropped(self, monkeypatch, valid_reply):
        adapter = ClaudeAdapter()
        _install(
            monkeypatch,
            adapter,
            _claude_client([SimpleNamespace(type="text", text=valid_reply)]),
        )
        types = ExtractionTypes(tasks=True, habits=True, events=False, sleep=False)

        result = await adapter.process_text(
            "x",
            "sk-ant-test",
            "claude-sonnet-4-20250514",
            _options(extraction_types=types),
        )

        assert len(result.tasks) == 1
        assert len(result.habits) == 1
        assert result.events == []
        assert result.sleep_schedules == []

    @pytest.mark.asyncio
    async def test_authentication_error_message(self, monkeypatch):
        adapter = ClaudeAdapter()
        client = _client()
        client.messages.create = AsyncMock(side_effect=FakeAPIError("invalid x-api-key", 401))
        _install(monkeypatch, adapter, client)

        with pytest.raises(AuthenticationError, match="Invalid Claude API key"):
            await adapter.process_text(
                "x", "bad", "claude-sonnet-4-20250514", _options()
            )

        client.close.assert_awaited_once()


class TestGeminiAdapter:
    @pytest.mark.asyncio
    async def test_success(self, monkeypatch, valid_payload):
        adapter = GeminiAdapter()
        usage = SimpleNamespace(
            prompt_token_count=50, candidates_token_count=25, total_token_count=75
        )
        client = _gemini_client(json.dumps(valid_payload), usage)
        _install(monkeypatch, adapter, client)

        result = await adapter.process_text(
            "Sleep by 10:30", "gem-key", "gemini-2.0-flash", _options(max_tokens=800)
        )

        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["config"]["max_output_tokens"] == 800
        assert kwargs["config"]["response_mime_type"] == "application/json"
        assert kwargs["config"]["system_instruction"].startswith("You are")

        assert result.sleep_schedules[0].bedtime == "22:30"
        assert result.sleep_schedules[0].date == date(2026, 10, 18)
        assert result.usage is not None
        assert result.usage.total_tokens == 75
        client.aio.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_blocked_prompt(self, monkeypatch):
        adapter = GeminiAdapter()
        feedback = SimpleNamespace(block_reason="SAFETY")
        _install(monkeypatch, adapter, _gemini_client(None, feedback=feedback))

        with pytest.raises(UnknownError, match="safety filters") as exc_info:
            await adapter.process_text("x", "gem-key", "gemini-2.0-flash", _options())

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_json_is_parse_error(self, monkeypatch):
        adapter = GeminiAdapter()
        _install(monkeypatch, adapter, _gemini_client("{tasks: [}"))

        with pytest.raises(ParseError):
            await adapter.process_text("x", "gem-key", "gemini-2.0-flash", _options())

    @pytest.mark.asyncio
    async def test_code_attribute_errors_are_mapped(self, monkeypatch):
        class FakeGenAIError(Exception):
            code = 503

        adapter = GeminiAdapter()
        client = _client()
        client.aio.models.generate_content = AsyncMock(side_effect=FakeGenAIError("down"))
        _install(monkeypatch, adapter, client)

        with pytest.raises(ServiceError):
            await adapter.process_text("x", "gem-key", "gemini-2.0-flash", _options())

        client.aio.aclose.assert_awaited_once()
