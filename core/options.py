# core/options.py
"""Execution options controlling backend selection and generation behaviour."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from core.errors import ConfigurationError
from core.models import max_tokens_limit


def _check_range(
    name: str, value: float | int | None, low: float, high: float
) -> None:
    if value is not None and not (low <= value <= high):
        raise ValueError(f"{name} must be between {low} and {high}")


class ExecutionOptions(BaseModel):
    """Immutable generation settings passed to a backend.

    Every bounded numeric field is checked against its closed range when the
    instance is built. Any failure is reported as ``ConfigurationError``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    stop_sequences: tuple[str, ...] | None = None
    stream: bool = False
    system: str | None = None
    response_format: Literal["json_object", "text"] | None = None
    logprobs: bool | None = None
    top_logprobs: int | None = None
    user: str | None = None
    seed: int | None = None
    # Return the backend response untouched, skipping normalization.
    raw_output: bool = False

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    @model_validator(mode="after")
    def _validate_ranges(self) -> ExecutionOptions:
        limit = max_tokens_limit(self.model)
        if self.max_tokens is not None and not (1 <= self.max_tokens <= limit):
            if self.model:
                raise ValueError(
                    f"max_tokens for model {self.model} must be between 1 and {limit}"
                )
            raise ValueError(f"max_tokens must be between 1 and {limit}")
        _check_range("temperature", self.temperature, 0, 1)
        _check_range("top_p", self.top_p, 0, 1)
        _check_range("frequency_penalty", self.frequency_penalty, -2.0, 2.0)
        _check_range("presence_penalty", self.presence_penalty, -2.0, 2.0)
        _check_range("top_logprobs", self.top_logprobs, 0, 20)
        return self

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-ready copy with unset fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


def create_execution_options(**kwargs: Any) -> ExecutionOptions:
    """Build validated options, raising ``ConfigurationError`` on bad input."""
    return ExecutionOptions(**kwargs)
