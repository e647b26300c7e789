from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from dispensary.core.config import OWNER_OPEN_ID
from dispensary.models.user import USER_ROLES, User
from dispensary.services.auth import decode_session_token, extract_session_token

logger = logging.getLogger(__name__)


def _extract_user_id(payload: dict) -> Optional[int]:
    raw = payload.get("sub")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


class AuthService:
    """Resolução centralizada da sessão do usuário (cookie HTTP-only ou Bearer)."""

    @staticmethod
    def resolve_session_user(request: Request, db: Session) -> Optional[User]:
        payload = getattr(request.state, "session_payload", None)
        if payload is None:
            token = extract_session_token(request)
            payload = decode_session_token(token) if token else None
        if not payload:
            return None

        user_id = _extract_user_id(payload)
        if user_id is None:
            return None

        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            logger.warning("Session for unknown user_id=%s", user_id)
            return None
        return user


def upsert_user(
    db: Session,
    *,
    open_id: str,
    name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    login_method: str | None = None,
    role: str | None = None,
) -> User:
    """Cria ou atualiza o usuário pelo open_id do provedor de identidade.

    Só sobrescreve campos informados. O dono (OWNER_OPEN_ID) vira admin.
    """
    if not open_id:
        raise ValueError("open_id is required for upsert")
    if role is not None and role not in USER_ROLES:
        raise ValueError(f"invalid role: {role}")

    user = db.query(User).filter(User.open_id == open_id).first()
    created = user is None
    if user is None:
        user = User(open_id=open_id)
        db.add(user)

    for field, value in (("name", name), ("email", email), ("phone", phone), ("login_method", login_method)):
        if value is not None:
            setattr(user, field, value)

    if role is not None:
        user.role = role
    elif OWNER_OPEN_ID and open_id == OWNER_OPEN_ID:
        user.role = "admin"
    elif created:
        user.role = "user"

    user.last_signed_in = datetime.utcnow()
    db.commit()
    db.refresh(user)
    logger.info("User upserted id=%s created=%s role=%s", user.id, created, user.role)
    return user
