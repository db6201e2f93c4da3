# orchestration/prompt_task.py
"""Single-request lifecycle: render, dispatch, record and normalize."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

from config import settings
from core.backend_resolver import resolve_backend
from core.backends import LLMBackend
from core.errors import ConfigurationError
from core.options import ExecutionOptions
from core.response_parsing import StructuredValue, normalize_response
from prompt_renderer import PromptTemplate, create_prompt_template
from storage.version_store import ExecutionRecord, VersionStore, generate_record_id

logger = structlog.get_logger(__name__)

TOutput = TypeVar("TOutput")


@dataclass(frozen=True)
class VersioningOptions:
    enabled: bool = False
    store_path: str = settings.PROMPT_VERSIONS_DIR


class PromptTask(Generic[TOutput]):
    """Run one templated request against a resolved backend.

    The backend is resolved on the first ``run`` and reused afterwards.
    Backend and persistence failures propagate to the caller unchanged.
    With ``raw_output`` set the backend reply is returned as is; otherwise
    it is normalized and either the decoded JSON or the cleaned text comes
    back.
    """

    def __init__(
        self,
        template: PromptTemplate,
        options: ExecutionOptions,
        versioning: VersioningOptions | None = None,
    ) -> None:
        if not options.model:
            raise ConfigurationError("Model not specified in execution options.")
        self.template = template
        self.options = options
        self.versioning = versioning or VersioningOptions()
        self._backend: LLMBackend | None = None
        self._store: VersionStore | None = None
        self.version_id: str | None = None
        if self.versioning.enabled:
            self._store = VersionStore(self.versioning.store_path)
            # One identity per task instance; later runs rewrite the same record
            self.version_id = generate_record_id()

    async def _get_backend(self) -> LLMBackend:
        if self._backend is None:
            self._backend = await resolve_backend(self.options.model)
        return self._backend

    async def run(self, bindings: Mapping[str, Any]) -> TOutput:
        backend = await self._get_backend()
        prompt = self.template.render(bindings)
        logger.debug(
            "Dispatching prompt",
            model=self.options.model,
            prompt_chars=len(prompt),
        )
        response = await backend.dispatch(prompt, self.options)

        if self._store is not None and self.version_id is not None:
            await self._save_version(self._store, self.version_id)

        if self.options.raw_output or not isinstance(response, str):
            return response  # type: ignore[return-value]

        result = normalize_response(response)
        if isinstance(result, StructuredValue):
            return result.value
        return result.text  # type: ignore[return-value]

    async def _save_version(self, store: VersionStore, record_id: str) -> None:
        record = ExecutionRecord(
            id=record_id,
            template=self.template.text,
            options=self.options.snapshot(),
        )
        await store.save(record)


def create_prompt_task(
    template: str,
    options: ExecutionOptions,
    versioning: VersioningOptions | None = None,
) -> PromptTask[Any]:
    """Compile ``template`` and bind it to ``options`` in one call."""
    return PromptTask(create_prompt_template(template), options, versioning)
