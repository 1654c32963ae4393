from deep_research.llm.base import DEFAULT_MODEL, Completion, ModelClient
from deep_research.llm.claude import ClaudeModelClient

__all__ = [
    "DEFAULT_MODEL",
    "ClaudeModelClient",
    "Completion",
    "ModelClient",
]
