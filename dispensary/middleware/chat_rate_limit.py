from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from dispensary.core.config import CHAT_RATE_LIMIT_PER_MINUTE
from dispensary.core.rate_limiter import InMemoryRateLimiterService, RateLimiterService

CHAT_PATH_PREFIX = "/api/chat"


class ChatRateLimitMiddleware(BaseHTTPMiddleware):
    """Limita escritas no chat por identidade; cada mensagem pode disparar o LLM."""

    def __init__(self, app, *, rate_limiter: RateLimiterService | None = None) -> None:
        super().__init__(app)
        self._rate_limiter = rate_limiter or InMemoryRateLimiterService(limit=CHAT_RATE_LIMIT_PER_MINUTE)

    async def dispatch(self, request: Request, call_next):
        if request.method not in {"POST", "PUT"} or not request.url.path.startswith(CHAT_PATH_PREFIX):
            return await call_next(request)

        identity = _extract_identity(request)
        decision = self._rate_limiter.check(identity=identity, endpoint=CHAT_PATH_PREFIX)
        if not decision.allowed:
            return JSONResponse(
                status_code=429,
                content={"detail": {"code": "TOO_MANY_REQUESTS", "message": "Too many chat requests"}},
                headers={
                    "Retry-After": str(decision.retry_after_seconds),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": str(decision.remaining),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response


def _extract_identity(request: Request) -> str:
    payload = getattr(request.state, "session_payload", None) or {}
    user_id = payload.get("sub")
    if user_id:
        return f"user:{user_id}"
    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"
