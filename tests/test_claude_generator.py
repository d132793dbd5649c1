"""Tests for ClaudeTextGenerator."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from anthropic.types import TextBlock

from worldwire.data import Usage
from worldwire.enrichment.claude import JSON_INSTRUCTION, ClaudeTextGenerator


def _make_mock_usage(input_tokens: int = 100, output_tokens: int = 50) -> MagicMock:
    """Create a mock usage object."""
    usage = MagicMock()
    usage.input_tokens = input_tokens
    usage.output_tokens = output_tokens
    return usage


@pytest.fixture
def mock_response() -> MagicMock:
    """Create a mock API response with a real TextBlock."""
    response = MagicMock()
    response.content = [TextBlock(type="text", text='{"narrative": "Something happened."}')]
    response.usage = _make_mock_usage()
    return response


@pytest.fixture
def generator(mock_response: MagicMock) -> ClaudeTextGenerator:
    """Create a generator with mocked API client."""
    gen = ClaudeTextGenerator(api_key="test-key")
    object.__setattr__(gen._client.messages, "create", AsyncMock(return_value=mock_response))
    return gen


async def test_generate_returns_text(generator: ClaudeTextGenerator) -> None:
    text, _ = await generator.generate("Describe the event", system="You are a historian.")

    assert text == '{"narrative": "Something happened."}'


async def test_generate_returns_usage(generator: ClaudeTextGenerator) -> None:
    _, usage = await generator.generate("Describe the event", system="s")

    assert isinstance(usage, Usage)
    assert len(usage.api_calls) == 1
    assert usage.input_tokens == 100
    assert usage.output_tokens == 50
    assert usage.api_calls[0].model == "claude-haiku-4-5-20251001"


async def test_generate_calls_api_with_correct_params(generator: ClaudeTextGenerator) -> None:
    await generator.generate("Describe the event", system="You are a historian.")

    call_kwargs = generator._client.messages.create.call_args.kwargs
    assert call_kwargs["model"] == "claude-haiku-4-5-20251001"
    assert call_kwargs["max_tokens"] == 2048
    assert call_kwargs["temperature"] == 0.3
    assert call_kwargs["system"] == "You are a historian."
    assert call_kwargs["messages"] == [{"role": "user", "content": "Describe the event"}]


async def test_json_output_extends_system_prompt(generator: ClaudeTextGenerator) -> None:
    await generator.generate("p", system="You are a historian.", json_output=True)

    system = generator._client.messages.create.call_args.kwargs["system"]
    assert system.startswith("You are a historian.")
    assert system.endswith(JSON_INSTRUCTION)


async def test_generate_joins_text_blocks(mock_response: MagicMock) -> None:
    mock_response.content = [
        TextBlock(type="text", text='{"a": '),
        TextBlock(type="text", text="1}"),
    ]
    gen = ClaudeTextGenerator(api_key="test-key", model="claude-sonnet-4-5")
    object.__setattr__(gen._client.messages, "create", AsyncMock(return_value=mock_response))

    text, usage = await gen.generate("p", system="s")

    assert text == '{"a": 1}'
    assert usage.api_calls[0].model == "claude-sonnet-4-5"


async def test_empty_response_raises(mock_response: MagicMock) -> None:
    mock_response.content = [TextBlock(type="text", text="   ")]
    gen = ClaudeTextGenerator(api_key="test-key")
    object.__setattr__(gen._client.messages, "create", AsyncMock(return_value=mock_response))

    with pytest.raises(ValueError, match="Empty response"):
        await gen.generate("p", system="s")


async def test_api_errors_propagate() -> None:
    gen = ClaudeTextGenerator(api_key="test-key")
    object.__setattr__(
        gen._client.messages, "create", AsyncMock(side_effect=RuntimeError("overloaded"))
    )

    with pytest.raises(RuntimeError, match="overloaded"):
        await gen.generate("p", system="s")
