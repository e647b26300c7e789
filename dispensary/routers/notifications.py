from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dispensary.core.database import get_db
from dispensary.core.formatting import iso
from dispensary.deps import get_current_user
from dispensary.models.notification import Notification
from dispensary.models.user import User
from dispensary.services import content

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _notification_to_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "related_order_id": n.related_order_id,
        "related_appointment_id": n.related_appointment_id,
        "read": n.read,
        "created_at": iso(n.created_at),
    }


@router.get("")
def list_notifications(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [_notification_to_dict(n) for n in content.list_notifications(db, user.id)]
