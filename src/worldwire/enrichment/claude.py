"""Claude-backed text generator."""

import logging
import os

import anthropic

from worldwire.data import APICallUsage, Usage

logger = logging.getLogger(__name__)

JSON_INSTRUCTION = "Respond ONLY with a single JSON object (no markdown fences, no commentary)."


class ClaudeTextGenerator:
    """Generate text with Anthropic's Claude API.

    Args:
        model: Anthropic model ID to use.
        api_key: API key (defaults to CLAUDE_API_KEY env var).
        max_tokens: Maximum tokens per response.
        temperature: Sampling temperature.
        timeout_seconds: Timeout of a single API request.
    """

    def __init__(
        self,
        *,
        model: str = "claude-haiku-4-5-20251001",
        api_key: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._model = model
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        self._client = anthropic.AsyncAnthropic(
            api_key=resolved_key,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def generate(
        self,
        prompt: str,
        *,
        system: str,
        json_output: bool = False,
    ) -> tuple[str, Usage]:
        if json_output:
            system = f"{system}\n\n{JSON_INSTRUCTION}"

        response = await self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )

        usage = Usage(
            api_calls=[
                APICallUsage(
                    model=self._model,
                    input_tokens=response.usage.input_tokens,
                    output_tokens=response.usage.output_tokens,
                ),
            ],
        )

        text = ""
        for block in response.content:
            if hasattr(block, "text"):
                text += block.text
        if not text.strip():
            raise ValueError("Empty response from Claude")
        return (text, usage)
