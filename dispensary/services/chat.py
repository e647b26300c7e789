from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dispensary.ai import service as ai_service
from dispensary.ai.base import LLMProvider
from dispensary.core.errors import InternalError, NotFoundError, ValidationError
from dispensary.models.chat_agent import AGENT_STATUSES, ChatAgent
from dispensary.models.chat_message import SYSTEM_SENDER_ID, ChatMessage
from dispensary.models.conversation import OPEN_CONVERSATION_STATUSES, ChatConversation
from dispensary.models.user import User
from dispensary.services.authorization_service import AuthorizationService
from dispensary.services.chat_updates import ChatUpdateFeed, default_feed

logger = logging.getLogger(__name__)


def _load_conversation(db: Session, conversation_id: int) -> ChatConversation:
    conversation = db.query(ChatConversation).filter(ChatConversation.id == conversation_id).first()
    if conversation is None:
        raise NotFoundError(f"Conversation {conversation_id} not found")
    return conversation


def get_conversation_for(db: Session, conversation_id: int, caller: User) -> ChatConversation:
    """Relê a conversa e exige owner ou admin antes de qualquer operação."""
    conversation = _load_conversation(db, conversation_id)
    AuthorizationService.ensure_conversation_access(user=caller, conversation=conversation)
    return conversation


def _commit(db: Session, action: str, conversation_id: int | None) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Chat %s failed conversation_id=%s", action, conversation_id)
        raise InternalError(f"Failed to {action}")


def start_or_get_conversation(db: Session, user_id: int, subject: str | None = None) -> ChatConversation:
    existing = (
        db.query(ChatConversation)
        .filter(
            ChatConversation.user_id == user_id,
            ChatConversation.status.in_(OPEN_CONVERSATION_STATUSES),
        )
        .order_by(ChatConversation.id.asc())
        .first()
    )
    if existing is not None:
        return existing

    now = datetime.utcnow()
    conversation = ChatConversation(
        user_id=user_id,
        status="waiting",
        subject=(subject or "").strip() or None,
        started_at=now,
        created_at=now,
        updated_at=now,
    )
    db.add(conversation)
    _commit(db, "start conversation", None)
    db.refresh(conversation)
    logger.info("Conversation started conversation_id=%s user_id=%s", conversation.id, user_id)
    return conversation


def list_user_conversations(db: Session, user_id: int) -> list[ChatConversation]:
    return (
        db.query(ChatConversation)
        .filter(ChatConversation.user_id == user_id)
        .order_by(ChatConversation.created_at.desc(), ChatConversation.id.desc())
        .all()
    )


def list_messages(
    db: Session,
    conversation_id: int,
    caller: User,
    after_id: Optional[int] = None,
    *,
    feed: ChatUpdateFeed | None = None,
) -> list[ChatMessage]:
    get_conversation_for(db, conversation_id, caller)
    return (feed or default_feed).fetch_since(db, conversation_id, after_id)


def _store_auto_reply(db: Session, conversation: ChatConversation, text: str) -> ChatMessage | None:
    reply = ChatMessage(
        conversation_id=conversation.id,
        sender_id=SYSTEM_SENDER_ID,
        sender_type="agent",
        message=text,
        is_read=False,
        created_at=datetime.utcnow(),
    )
    try:
        db.add(reply)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Auto-reply not stored conversation_id=%s", conversation.id)
        return None
    return reply


def send_message(
    db: Session,
    conversation_id: int,
    sender: User,
    text: str,
    llm: LLMProvider | None = None,
) -> dict[str, Any]:
    """Grava a mensagem do remetente e, se couber, a resposta automática do LLM.

    A mensagem do usuário é commitada antes de qualquer chamada ao LLM; falhas
    do provedor só viram log e o retorno fica com ``ai_response`` nulo.
    """
    conversation = get_conversation_for(db, conversation_id, sender)

    body = (text or "").strip()
    if not body:
        raise ValidationError("Message cannot be empty")
    if conversation.status == "closed":
        raise ValidationError("Conversation is closed")

    is_owner = int(conversation.user_id) == int(sender.id)
    sender_type = "customer" if is_owner else "agent"

    now = datetime.utcnow()
    message = ChatMessage(
        conversation_id=conversation.id,
        sender_id=sender.id,
        sender_type=sender_type,
        message=body,
        is_read=False,
        created_at=now,
    )
    db.add(message)
    conversation.updated_at = now
    _commit(db, "send message", conversation.id)
    db.refresh(message)

    ai_response: str | None = None
    if sender_type == "customer" and ai_service.wants_auto_reply(body):
        try:
            provider = llm or ai_service.get_provider()
        except Exception as exc:
            logger.warning("LLM provider unavailable conversation_id=%s: %s", conversation.id, exc)
            provider = None

        if provider is not None:
            result = ai_service.generate_auto_reply(provider, body)
            if result.text and _store_auto_reply(db, conversation, result.text) is not None:
                ai_response = result.text
            ai_service.log_invocation(
                db,
                conversation_id=conversation.id,
                provider=provider,
                prompt=body,
                result=result,
            )

    return {"message_id": message.id, "ai_response": ai_response}


def close_conversation(db: Session, conversation_id: int, caller: User) -> ChatConversation:
    conversation = get_conversation_for(db, conversation_id, caller)
    if conversation.status == "closed":
        return conversation

    now = datetime.utcnow()
    conversation.status = "closed"
    conversation.closed_at = now
    conversation.updated_at = now
    _commit(db, "close conversation", conversation.id)
    logger.info("Conversation closed conversation_id=%s by user_id=%s", conversation.id, caller.id)
    return conversation


def mark_as_read(db: Session, conversation_id: int, caller: User) -> int:
    conversation = get_conversation_for(db, conversation_id, caller)
    unread = (
        db.query(ChatMessage)
        .filter(
            ChatMessage.conversation_id == conversation.id,
            ChatMessage.is_read.is_(False),
            ChatMessage.sender_id != caller.id,
        )
        .all()
    )
    for message in unread:
        message.is_read = True
    if unread:
        _commit(db, "mark messages as read", conversation.id)
    return len(unread)


# =========================
# ADMIN / AGENTES
# =========================
def list_active_conversations(db: Session) -> list[ChatConversation]:
    return (
        db.query(ChatConversation)
        .filter(ChatConversation.status.in_(OPEN_CONVERSATION_STATUSES))
        .order_by(ChatConversation.updated_at.desc(), ChatConversation.id.desc())
        .all()
    )


def assign_agent(db: Session, conversation_id: int, agent_id: int) -> ChatConversation:
    conversation = _load_conversation(db, conversation_id)
    if conversation.status == "closed":
        raise ValidationError("Cannot assign a closed conversation")

    conversation.agent_id = agent_id
    conversation.status = "active"
    conversation.updated_at = datetime.utcnow()
    _commit(db, "assign agent", conversation.id)
    logger.info("Agent assigned conversation_id=%s agent_id=%s", conversation.id, agent_id)
    return conversation


def get_online_agents(db: Session) -> list[ChatAgent]:
    return (
        db.query(ChatAgent)
        .filter(ChatAgent.is_active.is_(True), ChatAgent.status == "online")
        .order_by(ChatAgent.display_name.asc())
        .all()
    )


def update_agent_status(db: Session, user: User, status: str) -> ChatAgent:
    normalized = (status or "").strip().lower()
    if normalized not in AGENT_STATUSES:
        raise ValidationError(f"Invalid agent status: {status}")

    agent = db.query(ChatAgent).filter(ChatAgent.user_id == user.id).first()
    if agent is None:
        raise NotFoundError("Agent profile not found")

    agent.status = normalized
    agent.updated_at = datetime.utcnow()
    _commit(db, "update agent status", None)
    logger.info("Agent status updated user_id=%s status=%s", user.id, normalized)
    return agent
