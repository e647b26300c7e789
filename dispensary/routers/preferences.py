from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dispensary.core.database import get_db
from dispensary.core.formatting import iso
from dispensary.deps import get_current_user
from dispensary.models.user import User
from dispensary.services import content

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


@router.get("")
def get_preferences(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    pref = content.get_preferences(db, user.id)
    if pref is None:
        return None
    return {
        "user_id": pref.user_id,
        "favorite_products": content.load_json_field(pref.favorite_products, []),
        "preferred_fulfillment_type": pref.preferred_fulfillment_type,
        "notification_preferences": content.load_json_field(pref.notification_preferences, {}),
        "updated_at": iso(pref.updated_at),
    }
