from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TokenUsage:
    """Token counts reported by a backend, accumulated across calls."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    calls: int = 0

    @classmethod
    def from_anthropic(cls, usage: dict[str, int] | None) -> TokenUsage:
        """Convert Anthropic ``input_tokens``/``output_tokens`` counts."""
        if not usage:
            return cls()
        prompt = usage.get("input_tokens", 0)
        completion = usage.get("output_tokens", 0)
        return cls(
            prompt_tokens=prompt,
            completion_tokens=completion,
            total_tokens=prompt + completion,
        )

    def add(self, usage: TokenUsage | dict[str, int] | None) -> None:
        """Accumulate one call's usage from another instance or dictionary."""
        self.calls += 1
        if not usage:
            return
        if isinstance(usage, TokenUsage):
            self.prompt_tokens += usage.prompt_tokens
            self.completion_tokens += usage.completion_tokens
            self.total_tokens += usage.total_tokens
        else:
            self.prompt_tokens += usage.get("prompt_tokens", 0)
            self.completion_tokens += usage.get("completion_tokens", 0)
            self.total_tokens += usage.get("total_tokens", 0)

    def as_dict(self) -> dict[str, int]:
        return {
            "calls": self.calls,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }
