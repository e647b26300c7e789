from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from dispensary.core.formatting import iso
from dispensary.deps import get_optional_user
from dispensary.models.user import User
from dispensary.services.auth import clear_session_cookie

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "open_id": user.open_id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "age_verified": user.age_verified,
        "age_verified_at": iso(user.age_verified_at),
        "last_signed_in": iso(user.last_signed_in),
    }


@router.get("/me")
def me(user: Optional[User] = Depends(get_optional_user)):
    if user is None:
        return None
    return _user_to_dict(user)


@router.post("/logout")
def logout(request: Request, response: Response):
    clear_session_cookie(response, request)
    return {"success": True}
