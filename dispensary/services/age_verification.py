from __future__ import annotations

import logging
from datetime import datetime

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dispensary.core.errors import InternalError
from dispensary.models.age_verification import AgeVerification
from dispensary.models.user import User

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"


def resolve_client_ip(request: Request) -> str:
    """IP resolvido pelo servidor ASGI.

    Proxies só são confiáveis via --forwarded-allow-ips do uvicorn; headers e
    campos do body enviados pelo cliente nunca são lidos aqui.
    """
    client = request.client
    host = getattr(client, "host", None) if client else None
    return host or UNKNOWN_IP


def verify_age(db: Session, *, ip_address: str, user: User | None = None) -> AgeVerification:
    now = datetime.utcnow()
    if user is not None:
        user.age_verified = True
        user.age_verified_at = now

    record = AgeVerification(
        user_id=user.id if user is not None else None,
        ip_address=ip_address or UNKNOWN_IP,
        verified_at=now,
        method="self_attestation",
    )
    db.add(record)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Age verification insert failed ip=%s", ip_address)
        raise InternalError("Failed to record age verification")

    logger.info("Age verified user_id=%s ip=%s", record.user_id, record.ip_address)
    return record
