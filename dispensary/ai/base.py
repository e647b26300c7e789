from __future__ import annotations

from typing import Protocol, Sequence


class LLMProvider(Protocol):
    name: str
    model: str | None

    def complete(self, messages: Sequence[dict[str, str]]) -> str:
        """Recebe mensagens [{role, content}] e devolve o texto gerado."""
        ...


class LLMProviderError(RuntimeError):
    """Falha do provedor externo (timeout, HTTP, payload inválido)."""
