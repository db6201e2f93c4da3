# core/backends/base.py
"""Shared plumbing for HTTP model backends."""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from config import settings
from core.errors import BackendDispatchError
from core.models import ModelFamily
from core.options import ExecutionOptions
from core.usage import TokenUsage

logger = structlog.get_logger(__name__)


class LLMBackend(ABC):
    """A resolved, reusable handle on one backend family.

    Subclasses translate ``ExecutionOptions`` into the provider payload and
    extract the response text. Transport, HTTP and decoding failures surface
    as ``BackendDispatchError``; nothing is retried.
    """

    family: ModelFamily

    def __init__(
        self,
        timeout: float = settings.HTTPX_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        # One client per handle so connections are reused across calls
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self.usage = TokenUsage()

    async def dispatch(self, prompt: str, options: ExecutionOptions) -> str:
        """Send ``prompt`` as a single user message and return the reply text."""
        return await self.chat_completion(
            [{"role": "user", "content": prompt}], options
        )

    @abstractmethod
    async def chat_completion(
        self, messages: list[dict[str, Any]], options: ExecutionOptions
    ) -> str:
        """Run a chat completion over ``messages``."""

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str],
        model_name: str,
    ) -> dict[str, Any]:
        logger.debug(
            "Starting LLM API call",
            family=self.family.value,
            model=model_name,
            url=url,
        )
        start = time.perf_counter()
        try:
            response = await self._client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error(
                "Error calling LLM API",
                model=model_name,
                status_code=status,
                body=exc.response.text[:200],
            )
            raise BackendDispatchError(
                f"{self.family.value} returned HTTP {status} for '{model_name}'",
                model_name=model_name,
                status_code=status,
            ) from exc
        except httpx.RequestError as exc:
            logger.error("Error calling LLM API", model=model_name, error=str(exc))
            raise BackendDispatchError(
                f"Request to {self.family.value} failed for '{model_name}': {exc}",
                model_name=model_name,
            ) from exc
        except json.JSONDecodeError as exc:
            raise BackendDispatchError(
                f"{self.family.value} returned a non-JSON body for '{model_name}'",
                model_name=model_name,
                status_code=response.status_code,
            ) from exc

        duration_ms = int((time.perf_counter() - start) * 1000)
        if not isinstance(data, dict):
            raise BackendDispatchError(
                f"Unexpected response structure from {self.family.value}: {data!r}",
                model_name=model_name,
            )
        logger.debug("LLM API call complete", model=model_name, duration_ms=duration_ms)
        return data

    def _record_usage(self, model_name: str, usage: TokenUsage) -> None:
        self.usage.add(usage)
        logger.info(
            "LLM token usage",
            model=model_name,
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
            accumulated_total=self.usage.total_tokens,
        )
