"""Backend implementations, one per model family."""

from .anthropic_backend import AnthropicBackend
from .base import LLMBackend
from .openai_backend import OpenAIBackend

__all__ = ["LLMBackend", "OpenAIBackend", "AnthropicBackend"]
