from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class CompletionMessage(BaseModel):
    role: str = Field(..., min_length=1)
    content: Optional[str] = None


class CompletionChoice(BaseModel):
    index: int = 0
    message: CompletionMessage
    finish_reason: Optional[str] = None


class CompletionResponse(BaseModel):
    id: Optional[str] = None
    model: Optional[str] = None
    choices: List[CompletionChoice] = Field(default_factory=list)

    def first_text(self) -> str:
        for choice in self.choices:
            text = (choice.message.content or "").strip()
            if text:
                return text
        return ""
