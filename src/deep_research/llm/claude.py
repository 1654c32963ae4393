import logging
import os

import anthropic
from anthropic.types import TextBlock

from deep_research.llm.base import Completion

logger = logging.getLogger(__name__)


class ClaudeModelClient:
    """Model client backed by Anthropic's Messages API.

    Args:
        api_key: API key (defaults to CLAUDE_API_KEY env var).
    """

    def __init__(self, *, api_key: str | None = None) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float,
    ) -> Completion:
        response = await self._client.messages.create(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=messages,  # type: ignore[arg-type]
        )
        text = "".join(block.text for block in response.content if isinstance(block, TextBlock))
        logger.debug(
            "Model %s used %d input / %d output tokens",
            model,
            response.usage.input_tokens,
            response.usage.output_tokens,
        )
        return Completion(content=text)
