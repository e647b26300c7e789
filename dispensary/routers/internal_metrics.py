from __future__ import annotations

from fastapi import APIRouter, Depends

from dispensary.core.metrics import request_metrics
from dispensary.deps import require_admin
from dispensary.models.user import User

router = APIRouter(prefix="/api/internal/metrics", tags=["internal-metrics"])


@router.get("")
def endpoint_metrics(_user: User = Depends(require_admin)):
    return {"endpoints": request_metrics.snapshot()}
