# dispensary/deps.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from dispensary.core.database import get_db
from dispensary.core.errors import ForbiddenError, UnauthorizedError
from dispensary.models.user import User
from dispensary.services.auth_service import AuthService

logger = logging.getLogger(__name__)


def user_is_admin(user: User | None) -> bool:
    return str(getattr(user, "role", "") or "").strip().lower() == "admin"


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Procedimentos públicos: usuário da sessão ou None."""
    user = AuthService.resolve_session_user(request, db)
    request.state.user = user
    return user


def get_current_user(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
) -> User:
    """Procedimentos protegidos: exige sessão válida."""
    if user is None:
        raise UnauthorizedError("Please login", headers={"WWW-Authenticate": "Bearer"})
    return user


def require_admin(
    request: Request,
    user: User = Depends(get_current_user),
) -> User:
    """Procedimentos de admin: exige role admin."""
    if not user_is_admin(user):
        logger.warning(
            "Access denied (role_denied): user_id=%s user_role=%s endpoint=%s",
            getattr(user, "id", None),
            getattr(user, "role", None),
            f"{request.method} {request.url.path}",
        )
        raise ForbiddenError("You do not have required permission")
    return user
