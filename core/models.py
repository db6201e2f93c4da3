# core/models.py
"""Catalogue of supported model identifiers and their limits."""

from __future__ import annotations

from enum import Enum


class ModelFamily(str, Enum):
    """Backend families; each family is served by one backend class."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


# https://platform.openai.com/docs/models/overview
OPENAI_MODELS: tuple[str, ...] = (
    "gpt-4o-2024-05-13",
    "gpt-4o-2024-08-06",
    "gpt-4o-mini-2024-07-18",
    "gpt-3.5-turbo-0125",
)

# https://docs.anthropic.com/en/docs/models-overview
ANTHROPIC_MODELS: tuple[str, ...] = (
    "claude-3-opus-20240229",
    "claude-3-sonnet-20240229",
    "claude-3-haiku-20240307",
    "claude-3-5-sonnet-20240620",
)

MODEL_FAMILIES: dict[str, ModelFamily] = {
    **{name: ModelFamily.OPENAI for name in OPENAI_MODELS},
    **{name: ModelFamily.ANTHROPIC for name in ANTHROPIC_MODELS},
}

MODEL_MAX_TOKENS: dict[str, int] = {
    **{name: 4096 for name in OPENAI_MODELS},
    **{name: 9000 for name in ANTHROPIC_MODELS},
}

# Applies when no model, or an uncatalogued one, is given.
DEFAULT_MAX_TOKENS_LIMIT = 2048


def family_for_model(model_name: str) -> ModelFamily | None:
    """Return the backend family serving ``model_name`` or ``None``."""
    return MODEL_FAMILIES.get(model_name)


def max_tokens_limit(model_name: str | None) -> int:
    if model_name is None:
        return DEFAULT_MAX_TOKENS_LIMIT
    return MODEL_MAX_TOKENS.get(model_name, DEFAULT_MAX_TOKENS_LIMIT)
