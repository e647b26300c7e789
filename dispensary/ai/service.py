from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from dispensary.ai.base import LLMProvider
from dispensary.ai.http_provider import HttpLLMProvider
from dispensary.ai.mock_provider import MockProvider
from dispensary.core.config import LLM_PROVIDER
from dispensary.models.ai_message_log import AIMessageLog

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful cannabis dispensary assistant. Provide brief, friendly product "
    "recommendations based on customer needs. Keep responses under 100 words."
)
AUTO_REPLY_KEYWORDS = ("recommend", "suggest", "help", "product")


@dataclass
class AutoReplyResult:
    text: Optional[str]
    error: Optional[str]
    duration_ms: int


def get_provider(provider_name: str | None = None) -> LLMProvider:
    provider = (provider_name or LLM_PROVIDER or "mock").strip().lower()
    if provider == "http":
        return HttpLLMProvider()
    return MockProvider()


def wants_auto_reply(text: str) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in AUTO_REPLY_KEYWORDS)


def build_messages(user_text: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_text},
    ]


def generate_auto_reply(provider: LLMProvider, user_text: str) -> AutoReplyResult:
    """Chama o provedor e nunca propaga falhas: o erro volta no resultado."""
    start = time.perf_counter()
    try:
        text = provider.complete(build_messages(user_text))
        error = None
    except Exception as exc:
        logger.warning("LLM auto-reply failed provider=%s: %s", getattr(provider, "name", "?"), exc)
        text = None
        error = f"provider_error: {exc}"

    duration_ms = int((time.perf_counter() - start) * 1000)
    text = (text or "").strip() or None
    return AutoReplyResult(text=text, error=error, duration_ms=duration_ms)


def log_invocation(
    db: Session,
    *,
    conversation_id: int,
    provider: LLMProvider,
    prompt: str,
    result: AutoReplyResult,
) -> None:
    entry = AIMessageLog(
        conversation_id=conversation_id,
        provider=getattr(provider, "name", "unknown"),
        model=getattr(provider, "model", None),
        prompt=prompt,
        raw_response=result.text,
        error=result.error,
        duration_ms=result.duration_ms,
    )
    try:
        db.add(entry)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Falha ao gravar ai_message_log conversation_id=%s", conversation_id)
