from __future__ import annotations

import logging
from typing import Sequence

import httpx
from pydantic import ValidationError

from dispensary.ai.base import LLMProviderError
from dispensary.ai.schema import CompletionResponse
from dispensary.core.config import LLM_API_KEY, LLM_API_URL, LLM_MAX_TOKENS, LLM_MODEL, LLM_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class HttpLLMProvider:
    """Cliente de um endpoint chat-completions compatível com OpenAI."""

    name = "http"

    def __init__(
        self,
        *,
        base_url: str = LLM_API_URL,
        api_key: str = LLM_API_KEY,
        model: str = LLM_MODEL,
        timeout_seconds: float = LLM_TIMEOUT_SECONDS,
        max_tokens: int = LLM_MAX_TOKENS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise LLMProviderError("LLM_API_URL não configurado")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self._transport = transport

    def complete(self, messages: Sequence[dict[str, str]]) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "model": self.model,
            "messages": list(messages),
            "max_tokens": self.max_tokens,
        }

        try:
            with httpx.Client(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = client.post(f"{self.base_url}/chat/completions", json=payload, headers=headers)
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException as exc:
            raise LLMProviderError(f"timeout after {self.timeout_seconds}s") from exc
        except httpx.HTTPStatusError as exc:
            raise LLMProviderError(f"http {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise LLMProviderError(str(exc)) from exc

        try:
            parsed = CompletionResponse.model_validate(body)
        except ValidationError as exc:
            raise LLMProviderError(f"invalid completion payload: {exc}") from exc

        text = parsed.first_text()
        logger.debug("LLM completion model=%s chars=%s", parsed.model or self.model, len(text))
        return text
