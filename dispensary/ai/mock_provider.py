from __future__ import annotations

from typing import Sequence

_CATEGORY_HINTS = {
    "sleep": "an indica flower or a low-dose CBN tincture",
    "pain": "a balanced THC:CBD tincture or a topical balm",
    "relax": "a calming indica or a CBD-forward edible",
    "energy": "an uplifting sativa such as a citrus-forward strain",
    "focus": "a sativa-dominant hybrid in a small dose",
    "anxiety": "a high-CBD, low-THC option like a CBD tincture",
}


class MockProvider:
    """Provedor determinístico para dev/testes; não faz chamadas externas."""

    name = "mock"
    model = "mock"

    def complete(self, messages: Sequence[dict[str, str]]) -> str:
        user_text = ""
        for message in reversed(list(messages)):
            if message.get("role") == "user":
                user_text = (message.get("content") or "").lower()
                break

        for keyword, hint in _CATEGORY_HINTS.items():
            if keyword in user_text:
                return f"For {keyword}, many customers like {hint}. Ask our staff for today's in-stock picks!"

        return (
            "Happy to help! Tell me what effect you're looking for (relaxation, sleep, focus) "
            "and I'll suggest a few products from our menu."
        )
