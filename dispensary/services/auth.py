from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Request, Response
from jose import JWTError, jwt

from dispensary.core.config import (
    SESSION_ALGORITHM,
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SAMESITE,
    SESSION_COOKIE_SECURE,
    SESSION_MAX_AGE_SECONDS,
    SESSION_SECRET,
)


def _secret() -> str:
    if not SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET não configurado.")
    return SESSION_SECRET


# =========================
# JWT HELPERS
# =========================
def create_session_token(
    user_id: int,
    *,
    open_id: str,
    role: str,
    expires_seconds: int = SESSION_MAX_AGE_SECONDS,
) -> str:
    """
    IMPORTANTE:
    - "sub" precisa ser STRING (senão dá 'Subject must be a string')
    - role vai no token só como dica; deps.py sempre relê o usuário do banco
    """
    now = datetime.now(timezone.utc)
    exp = now + timedelta(seconds=expires_seconds)

    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "open_id": open_id,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, _secret(), algorithm=SESSION_ALGORITHM)


def decode_session_token(token: str) -> Optional[Dict[str, Any]]:
    """Retorna o payload do JWT ou None se inválido/expirado."""
    try:
        return jwt.decode(token, _secret(), algorithms=[SESSION_ALGORITHM])
    except (JWTError, RuntimeError):
        return None


def extract_session_token(request: Request) -> Optional[str]:
    """Cookie HTTP-only primeiro; header Bearer como fallback (clientes de API)."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        return token

    authorization = request.headers.get("authorization") or ""
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


# =========================
# COOKIE
# =========================
def build_session_cookie_options(request: Request | None = None) -> dict[str, Any]:
    secure = SESSION_COOKIE_SECURE
    samesite = SESSION_COOKIE_SAMESITE

    host = ""
    if request is not None:
        host = (request.headers.get("x-forwarded-host") or request.headers.get("host") or "").lower()
        host = host.split(",")[0].strip().split(":")[0]

    # Em hosts públicos, nunca emitir cookie inseguro.
    if host not in {"", "localhost", "127.0.0.1", "testserver"}:
        secure = True

    # Browsers rejeitam SameSite=None sem Secure.
    if samesite == "none" and not secure:
        samesite = "lax"

    return {
        "httponly": True,
        "samesite": samesite,
        "path": "/",
        "secure": secure,
    }


def set_session_cookie(response: Response, token: str, request: Request | None = None) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=SESSION_MAX_AGE_SECONDS,
        **build_session_cookie_options(request),
    )


def clear_session_cookie(response: Response, request: Request | None = None) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        **build_session_cookie_options(request),
    )
