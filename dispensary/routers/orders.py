from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from dispensary.core.database import get_db
from dispensary.core.formatting import iso, money
from dispensary.deps import get_current_user
from dispensary.models.order import Order
from dispensary.models.order_item import OrderItem
from dispensary.models.user import User
from dispensary.services import orders as order_service

router = APIRouter(prefix="/api/orders", tags=["orders"])


class OrderLineIn(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    items: List[OrderLineIn]
    fulfillment_type: str = Field(..., pattern="^(pickup|delivery)$")
    delivery_address: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


def _order_to_dict(o: Order) -> Dict[str, Any]:
    return {
        "id": o.id,
        "user_id": o.user_id,
        "order_number": o.order_number,
        "status": o.status,
        "fulfillment_type": o.fulfillment_type,
        "total_price": money(o.total_price),
        "estimated_ready_time": iso(o.estimated_ready_time),
        "actual_ready_time": iso(o.actual_ready_time),
        "delivery_address": o.delivery_address,
        "notes": o.notes,
        "created_at": iso(o.created_at),
    }


def _order_item_to_dict(item: OrderItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "order_id": item.order_id,
        "product_id": item.product_id,
        "quantity": item.quantity,
        "price_at_purchase": money(item.price_at_purchase),
        "created_at": iso(item.created_at),
    }


@router.get("")
def list_orders(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [_order_to_dict(o) for o in order_service.list_user_orders(db, user.id)]


@router.post("", status_code=201)
def create_order(
    payload: OrderCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = order_service.create_order(
        db,
        user.id,
        [line.model_dump() for line in payload.items],
        payload.fulfillment_type,
        delivery_address=payload.delivery_address,
        notes=payload.notes,
    )
    return {
        "order_id": result["order_id"],
        "order_number": result["order_number"],
        "estimated_ready_time": iso(result["estimated_ready_time"]),
    }


@router.get("/{order_id}")
def get_order(
    order_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _order_to_dict(order_service.get_user_order(db, user, order_id))


@router.get("/{order_id}/items")
def get_order_items(
    order_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [_order_item_to_dict(item) for item in order_service.get_order_items(db, user, order_id)]
