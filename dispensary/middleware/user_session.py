from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware

from dispensary.services.auth import decode_session_token, extract_session_token


class UserSessionMiddleware(BaseHTTPMiddleware):
    """Decodifica a sessão (cookie HTTP-only ou Bearer) uma vez por request."""

    async def dispatch(self, request, call_next):
        request.state.session_payload = None

        if request.url.path.startswith("/api"):
            token = extract_session_token(request)
            if token:
                request.state.session_payload = decode_session_token(token)

        return await call_next(request)
