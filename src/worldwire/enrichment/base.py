"""Protocol for the generative text service."""

from typing import Protocol

from worldwire.data import Usage


class TextGenerator(Protocol):
    """Interface for a generative text service."""

    async def generate(
        self,
        prompt: str,
        *,
        system: str,
        json_output: bool = False,
    ) -> tuple[str, Usage]:
        """Generate text for a prompt.

        Args:
            prompt: User prompt.
            system: System prompt.
            json_output: Ask for a single JSON object. The model may still wrap
                it in fences or extra text.

        Returns:
            Tuple of (response text, usage).
        """
        ...
