# core/backend_resolver.py
"""Maps model identifiers onto lazily created, process-wide backend handles."""

from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

from core.backends import AnthropicBackend, LLMBackend, OpenAIBackend
from core.errors import UnsupportedBackend
from core.models import ModelFamily, family_for_model

logger = structlog.get_logger(__name__)

BackendFactory = Callable[[], LLMBackend]

DEFAULT_FACTORIES: dict[ModelFamily, BackendFactory] = {
    ModelFamily.OPENAI: OpenAIBackend,
    ModelFamily.ANTHROPIC: AnthropicBackend,
}


class BackendResolver:
    """Resolve model identifiers to shared backend handles.

    Handles are created on first use and installed once per family. The
    cache is create-if-absent only; a handle is never replaced while
    installed. Construction errors such as a missing credential propagate
    and leave nothing cached, so a later call tries again.
    """

    def __init__(
        self, factories: dict[ModelFamily, BackendFactory] | None = None
    ) -> None:
        self._factories = dict(factories if factories is not None else DEFAULT_FACTORIES)
        self._handles: dict[ModelFamily, LLMBackend] = {}
        self._lock = threading.Lock()

    async def resolve(self, model_name: str) -> LLMBackend:
        family = family_for_model(model_name)
        if family is None or family not in self._factories:
            raise UnsupportedBackend(model_name)

        handle = self._handles.get(family)
        if handle is not None:
            return handle

        with self._lock:
            handle = self._handles.get(family)
            if handle is None:
                handle = self._factories[family]()
                self._handles[family] = handle
                logger.info(
                    "Backend handle created", family=family.value, model=model_name
                )
        return handle

    def usage_by_family(self) -> dict[str, dict[str, int]]:
        """Accumulated token usage of every installed handle."""
        with self._lock:
            handles = dict(self._handles)
        return {
            family.value: handle.usage.as_dict() for family, handle in handles.items()
        }

    async def aclose(self) -> None:
        """Close every installed handle and empty the cache."""
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()
        for handle in handles:
            await handle.aclose()

    def clear(self) -> None:
        """Forget installed handles without closing them."""
        with self._lock:
            self._handles.clear()


# Process-wide resolver shared by every prompt task
backend_resolver = BackendResolver()


async def resolve_backend(model_name: str) -> LLMBackend:
    return await backend_resolver.resolve(model_name)
