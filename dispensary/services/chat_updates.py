from __future__ import annotations

from typing import Optional, Protocol

from sqlalchemy.orm import Session

from dispensary.models.chat_message import ChatMessage


class ChatUpdateFeed(Protocol):
    """Fonte de mensagens novas de uma conversa.

    Hoje o widget e o painel do agente fazem polling; um transporte push
    pode implementar o mesmo contrato sem mexer nos models.
    """

    def fetch_since(self, db: Session, conversation_id: int, after_id: Optional[int] = None) -> list[ChatMessage]:
        ...


class PollingChatUpdateFeed:
    def fetch_since(self, db: Session, conversation_id: int, after_id: Optional[int] = None) -> list[ChatMessage]:
        query = db.query(ChatMessage).filter(ChatMessage.conversation_id == conversation_id)
        if after_id is not None:
            query = query.filter(ChatMessage.id > after_id)
        return query.order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc()).all()


default_feed: ChatUpdateFeed = PollingChatUpdateFeed()
