from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from dispensary.core.database import get_db
from dispensary.deps import get_optional_user
from dispensary.models.user import User
from dispensary.services.age_verification import resolve_client_ip, verify_age

router = APIRouter(prefix="/api/age-verification", tags=["age-verification"])


@router.post("/verify")
def verify(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    # body ignorado de propósito: ipAddress enviado pelo cliente não é confiável
    verify_age(db, ip_address=resolve_client_ip(request), user=user)
    return {"success": True}
