# core/backends/anthropic_backend.py
"""Backend for the Anthropic messages API."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from config import settings
from core.errors import BackendDispatchError, ConfigurationError
from core.models import ModelFamily
from core.options import ExecutionOptions
from core.usage import TokenUsage

from .base import LLMBackend

logger = structlog.get_logger(__name__)

DEFAULT_ANTHROPIC_MODEL = "claude-3-opus-20240229"


class AnthropicBackend(LLMBackend):
    family = ModelFamily.ANTHROPIC

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        timeout: float = settings.HTTPX_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        api_key = api_key if api_key is not None else settings.ANTHROPIC_API_KEY
        if not api_key:
            raise ConfigurationError(
                "ANTHROPIC_API_KEY is not set in the environment variables"
            )
        super().__init__(timeout=timeout, client=client)
        self._api_key = api_key
        self._api_base = (api_base or settings.ANTHROPIC_API_BASE).rstrip("/")

    def _build_payload(
        self, messages: list[dict[str, Any]], options: ExecutionOptions
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": options.model or DEFAULT_ANTHROPIC_MODEL,
            "messages": messages,
            "max_tokens": options.max_tokens or settings.ANTHROPIC_DEFAULT_MAX_TOKENS,
        }
        if options.system:
            payload["system"] = options.system
        if options.temperature is not None:
            payload["temperature"] = options.temperature
        if options.top_p is not None:
            payload["top_p"] = options.top_p
        if options.stop_sequences:
            payload["stop_sequences"] = list(options.stop_sequences)
        if options.user:
            payload["metadata"] = {"user_id": options.user}
        return payload

    async def chat_completion(
        self, messages: list[dict[str, Any]], options: ExecutionOptions
    ) -> str:
        payload = self._build_payload(messages, options)
        model_name = payload["model"]
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": settings.ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        data = await self._post_json(
            f"{self._api_base}/messages", payload, headers, model_name
        )

        blocks = data.get("content")
        if not isinstance(blocks, list):
            logger.error(
                "Anthropic response missing content blocks",
                model=model_name,
                response=data,
            )
            raise BackendDispatchError(
                "Anthropic response has no content blocks", model_name=model_name
            )
        # Only text blocks contribute; tool_use and others are ignored
        content = "".join(
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )

        self._record_usage(model_name, TokenUsage.from_anthropic(data.get("usage")))
        return content
