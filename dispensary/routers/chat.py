from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from dispensary.core.database import get_db
from dispensary.core.formatting import iso
from dispensary.deps import get_current_user, require_admin
from dispensary.models.chat_agent import ChatAgent
from dispensary.models.chat_message import ChatMessage
from dispensary.models.conversation import ChatConversation
from dispensary.models.user import User
from dispensary.services import chat as chat_service

router = APIRouter(prefix="/api/chat", tags=["chat"])


class ConversationStart(BaseModel):
    subject: Optional[str] = Field(default=None, max_length=255)


class MessageCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)


class AgentAssign(BaseModel):
    agent_id: int


class AgentStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(online|offline|away)$")


def _conversation_to_dict(c: ChatConversation) -> dict:
    return {
        "id": c.id,
        "user_id": c.user_id,
        "agent_id": c.agent_id,
        "status": c.status,
        "subject": c.subject,
        "started_at": iso(c.started_at),
        "closed_at": iso(c.closed_at),
        "created_at": iso(c.created_at),
        "updated_at": iso(c.updated_at),
    }


def _message_to_dict(m: ChatMessage) -> dict:
    return {
        "id": m.id,
        "conversation_id": m.conversation_id,
        "sender_id": m.sender_id,
        "sender_type": m.sender_type,
        "message": m.message,
        "is_read": m.is_read,
        "created_at": iso(m.created_at),
    }


def _agent_to_dict(a: ChatAgent) -> dict:
    return {
        "id": a.id,
        "user_id": a.user_id,
        "display_name": a.display_name,
        "status": a.status,
    }


# =========================
# CLIENTE
# =========================
@router.post("/conversations")
def start_conversation(
    payload: ConversationStart,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    conversation = chat_service.start_or_get_conversation(db, user.id, payload.subject)
    return _conversation_to_dict(conversation)


@router.get("/conversations")
def list_conversations(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [_conversation_to_dict(c) for c in chat_service.list_user_conversations(db, user.id)]


@router.get("/conversations/{conversation_id}/messages")
def get_messages(
    conversation_id: int,
    after_id: Optional[int] = Query(default=None, ge=0),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    messages = chat_service.list_messages(db, conversation_id, user, after_id=after_id)
    return [_message_to_dict(m) for m in messages]


@router.post("/conversations/{conversation_id}/messages")
def send_message(
    conversation_id: int,
    payload: MessageCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return chat_service.send_message(db, conversation_id, user, payload.message)


@router.post("/conversations/{conversation_id}/close")
def close_conversation(
    conversation_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    chat_service.close_conversation(db, conversation_id, user)
    return {"success": True}


@router.post("/conversations/{conversation_id}/read")
def mark_as_read(
    conversation_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = chat_service.mark_as_read(db, conversation_id, user)
    return {"success": True, "updated": updated}


# =========================
# ADMIN / AGENTES
# =========================
@router.get("/admin/conversations")
def list_active_conversations(
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return [_conversation_to_dict(c) for c in chat_service.list_active_conversations(db)]


@router.post("/admin/conversations/{conversation_id}/assign")
def assign_to_agent(
    conversation_id: int,
    payload: AgentAssign,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    chat_service.assign_agent(db, conversation_id, payload.agent_id)
    return {"success": True}


@router.put("/agents/me/status")
def update_agent_status(
    payload: AgentStatusUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    agent = chat_service.update_agent_status(db, user, payload.status)
    return _agent_to_dict(agent)


@router.get("/agents/online")
def get_online_agents(db: Session = Depends(get_db)):
    return [_agent_to_dict(a) for a in chat_service.get_online_agents(db)]
