from dataclasses import dataclass
from typing import Protocol

DEFAULT_MODEL = "claude-haiku-4-5-20251001"


@dataclass(frozen=True)
class Completion:
    """Text produced by a model call."""

    content: str


class ModelClient(Protocol):
    """Interface for asking a language model to complete a prompt."""

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float,
    ) -> Completion:
        """Complete a conversation.

        Args:
            model: Provider model ID.
            messages: ``{"role", "content"}`` dicts; the pipeline always sends
                a single user message.
            max_tokens: Output token budget.
            temperature: Sampling temperature.

        Returns:
            The model's text output.
        """
        ...
