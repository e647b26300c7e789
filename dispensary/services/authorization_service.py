from __future__ import annotations

import logging

from dispensary.core.errors import ForbiddenError
from dispensary.models.conversation import ChatConversation
from dispensary.models.order import Order
from dispensary.models.user import User

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Centraliza checagens de posse (owner ou admin) dos recursos do usuário."""

    @staticmethod
    def normalize_role(role: str | None) -> str:
        return (role or "").strip().lower()

    @classmethod
    def is_admin(cls, user: User | None) -> bool:
        return cls.normalize_role(getattr(user, "role", None)) == "admin"

    @staticmethod
    def log_access_denied(*, reason: str, user: User, resource: str, resource_id: int | None) -> None:
        logger.warning(
            "Access denied (%s): user_id=%s user_role=%s resource=%s resource_id=%s",
            reason,
            getattr(user, "id", None),
            getattr(user, "role", None),
            resource,
            resource_id,
        )

    @classmethod
    def ensure_conversation_access(cls, *, user: User, conversation: ChatConversation) -> None:
        if int(conversation.user_id) == int(user.id) or cls.is_admin(user):
            return
        cls.log_access_denied(
            reason="not_owner",
            user=user,
            resource="conversation",
            resource_id=conversation.id,
        )
        raise ForbiddenError("You do not have access to this conversation")

    @classmethod
    def ensure_order_owner(cls, *, user: User, order: Order) -> None:
        if int(order.user_id) == int(user.id):
            return
        cls.log_access_denied(reason="not_owner", user=user, resource="order", resource_id=order.id)
        raise ForbiddenError("You do not have access to this order")
