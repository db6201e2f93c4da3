# prompt_renderer.py
"""Prompt templates with ``{{name}}`` placeholders rendered through Jinja2.

Rendering is permissive: a placeholder with no binding renders as an empty
string, and dotted names (``{{customer.address.city}}``) walk nested
mappings, collapsing to an empty string as soon as a step is missing.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from jinja2 import ChainableUndefined, Environment, Template, TemplateSyntaxError
from pydantic import BaseModel

from core.errors import ConfigurationError

PLACEHOLDER_RE = re.compile(
    r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)\s*\}\}"
)


def _default_json_serializer(value: Any) -> Any:
    """Serialize pydantic models for JSON output."""
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    raise TypeError(
        f"Object of type {value.__class__.__name__} is not JSON serializable"
    )


class _BindingEnvironment(Environment):
    """Environment whose dotted lookups only walk mappings and pydantic models."""

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            try:
                return obj[attribute]
            except (KeyError, TypeError):
                return self.undefined(obj=obj, name=attribute)
        if isinstance(obj, BaseModel) and attribute in type(obj).model_fields:
            return getattr(obj, attribute)
        return self.undefined(obj=obj, name=attribute)


# Block and comment tags are moved out of reach so only {{ }} is special
_UNREACHABLE_TAG = "\ue000"

_env = _BindingEnvironment(
    block_start_string=_UNREACHABLE_TAG + "%",
    block_end_string="%" + _UNREACHABLE_TAG,
    comment_start_string=_UNREACHABLE_TAG + "#",
    comment_end_string="#" + _UNREACHABLE_TAG,
    autoescape=False,
    undefined=ChainableUndefined,
    keep_trailing_newline=True,
)
_env.policies["json.dumps_function"] = lambda obj, **kw: json.dumps(
    obj,
    default=_default_json_serializer,
    **kw,
)


def find_placeholders(text: str) -> tuple[str, ...]:
    """Return distinct placeholder names in order of first occurrence."""
    return tuple(dict.fromkeys(PLACEHOLDER_RE.findall(text)))


@dataclass(frozen=True)
class PromptTemplate:
    """An immutable prompt template, compiled once and reused."""

    text: str
    placeholders: tuple[str, ...] = field(init=False)
    _compiled: Template = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = _env.from_string(self.text)
        except TemplateSyntaxError as exc:
            raise ConfigurationError(f"Invalid prompt template: {exc}") from exc
        object.__setattr__(self, "placeholders", find_placeholders(self.text))
        object.__setattr__(self, "_compiled", compiled)

    def render(self, bindings: Mapping[str, Any]) -> str:
        return render_template(self, bindings)


def create_prompt_template(text: str) -> PromptTemplate:
    return PromptTemplate(text)


def render_template(template: PromptTemplate, bindings: Mapping[str, Any]) -> str:
    """Render ``template`` against ``bindings``."""
    return template._compiled.render(dict(bindings))


def render_prompt(text: str, bindings: Mapping[str, Any]) -> str:
    """Compile ``text`` and render it in one step."""
    return render_template(PromptTemplate(text), bindings)
