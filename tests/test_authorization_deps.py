from types import SimpleNamespace

import pytest
from starlette.requests import Request

from dispensary.core.errors import ForbiddenError, UnauthorizedError
from dispensary.deps import get_current_user, require_admin
from dispensary.services.authorization_service import AuthorizationService


def _build_request(path: str = "/api/resource", method: str = "GET") -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
        "path_params": {},
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
        "scheme": "http",
    }
    return Request(scope)


def test_get_current_user_rejects_missing_session():
    with pytest.raises(UnauthorizedError) as exc:
        get_current_user(request=_build_request(), user=None)

    assert exc.value.status_code == 401
    assert exc.value.detail["code"] == "UNAUTHORIZED"


def test_require_admin_denies_regular_user(caplog):
    user = SimpleNamespace(id=12, role="user")

    with pytest.raises(ForbiddenError) as exc:
        require_admin(request=_build_request(path="/api/internal/metrics"), user=user)

    assert exc.value.status_code == 403
    assert exc.value.detail["code"] == "FORBIDDEN"
    assert "role_denied" in caplog.text


def test_require_admin_accepts_admin_case_insensitive():
    user = SimpleNamespace(id=1, role=" Admin ")

    assert require_admin(request=_build_request(), user=user) is user


def test_conversation_access_owner_admin_and_stranger():
    conversation = SimpleNamespace(id=5, user_id=1)

    AuthorizationService.ensure_conversation_access(user=SimpleNamespace(id=1, role="user"), conversation=conversation)
    AuthorizationService.ensure_conversation_access(user=SimpleNamespace(id=9, role="admin"), conversation=conversation)

    with pytest.raises(ForbiddenError):
        AuthorizationService.ensure_conversation_access(
            user=SimpleNamespace(id=2, role="user"),
            conversation=conversation,
        )


def test_order_owner_check_does_not_exempt_admin():
    order = SimpleNamespace(id=3, user_id=1)

    with pytest.raises(ForbiddenError):
        AuthorizationService.ensure_order_owner(user=SimpleNamespace(id=9, role="admin"), order=order)
