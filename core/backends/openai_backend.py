# core/backends/openai_backend.py
"""Backend for the OpenAI chat completions API."""

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

DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo-0125"


class OpenAIBackend(LLMBackend):
    family = ModelFamily.OPENAI

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        timeout: float = settings.HTTPX_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        if not api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY is not set in the environment variables"
            )
        super().__init__(timeout=timeout, client=client)
        self._api_key = api_key
        self._api_base = (api_base or settings.OPENAI_API_BASE).rstrip("/")

    def _build_payload(
        self, messages: list[dict[str, Any]], options: ExecutionOptions
    ) -> dict[str, Any]:
        if options.system:
            messages = [{"role": "system", "content": options.system}, *messages]
        payload: dict[str, Any] = {
            "model": options.model or DEFAULT_OPENAI_MODEL,
            "messages": messages,
        }
        optional = {
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "top_p": options.top_p,
            "frequency_penalty": options.frequency_penalty,
            "presence_penalty": options.presence_penalty,
            "stop": list(options.stop_sequences) if options.stop_sequences else None,
            "seed": options.seed,
            "user": options.user,
            "logprobs": options.logprobs,
            "top_logprobs": options.top_logprobs,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        if options.response_format:
            payload["response_format"] = {"type": options.response_format}
        return payload

    async def chat_completion(
        self, messages: list[dict[str, Any]], options: ExecutionOptions
    ) -> str:
        payload = self._build_payload(messages, options)
        model_name = payload["model"]
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        data = await self._post_json(
            f"{self._api_base}/chat/completions", payload, headers, model_name
        )

        choices = data.get("choices") or []
        message = choices[0].get("message") if choices else None
        content = message.get("content") if message else None
        if content is None:
            logger.error(
                "OpenAI response missing choices/content",
                model=model_name,
                response=data,
            )
            raise BackendDispatchError(
                "Message content is null or undefined", model_name=model_name
            )

        usage = data.get("usage") or {}
        self._record_usage(
            model_name,
            TokenUsage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            ),
        )
        return content
