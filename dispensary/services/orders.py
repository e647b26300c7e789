import logging
import random
import time
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from sqlalchemy import desc, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dispensary.core.config import ORDER_DECREMENT_STOCK, ORDER_PREPARATION_HOURS
from dispensary.core.errors import (
    InsufficientStockError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from dispensary.models.order import FULFILLMENT_TYPES, Order
from dispensary.models.order_item import OrderItem
from dispensary.models.product import Product
from dispensary.models.user import User
from dispensary.services.authorization_service import AuthorizationService

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class _StockRaceLost(Exception):
    """Outro checkout levou o estoque entre a validação e o UPDATE."""

    def __init__(self, product: Product) -> None:
        super().__init__(product.name)
        self.product = product


def _get(d: Any, *keys, default=None):
    """Aceita dicts (snake/camel) ou objetos com atributos."""
    for k in keys:
        if isinstance(d, dict):
            if k in d and d[k] is not None:
                return d[k]
        elif getattr(d, k, None) is not None:
            return getattr(d, k)
    return default


def _merge_cart_lines(items: Iterable[Any]) -> list[tuple[int, int]]:
    """Soma quantidades de product_id repetido, preservando a ordem do carrinho."""
    merged: dict[int, int] = {}
    for entry in items:
        try:
            product_id = int(_get(entry, "product_id", "productId"))
            quantity = int(_get(entry, "quantity", "qty", default=0))
        except (TypeError, ValueError):
            raise ValidationError("Each item needs a numeric product_id and quantity")
        if quantity <= 0:
            raise ValidationError(f"Quantity for product {product_id} must be greater than zero")
        merged[product_id] = merged.get(product_id, 0) + quantity
    return list(merged.items())


def generate_order_number(now: datetime | None = None) -> str:
    millis = int((now.timestamp() if now else time.time()) * 1000)
    return f"ORD-{millis}-{random.randint(0, 999):03d}"


def to_money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def _decrement_stock(db: Session, product: Product, quantity: int) -> None:
    result = db.execute(
        update(Product)
        .where(Product.id == product.id, Product.quantity >= quantity)
        .values(quantity=Product.quantity - quantity)
    )
    if result.rowcount != 1:
        raise _StockRaceLost(product)


def create_order(
    db: Session,
    user_id: int,
    items: Iterable[Any],
    fulfillment_type: str,
    delivery_address: str | None = None,
    notes: str | None = None,
    *,
    decrement_stock: bool | None = None,
) -> dict[str, Any]:
    """Valida o carrinho contra estoque/preço e grava pedido + itens atomicamente.

    Toda validação acontece antes de qualquer escrita. Com decremento de estoque
    ligado, o UPDATE condicional roda na mesma transação e perder a corrida para
    outro checkout desfaz tudo com INSUFFICIENT_STOCK.
    """
    lines = _merge_cart_lines(items or [])
    if not lines:
        raise ValidationError("Order must contain at least one item")

    fulfillment = (fulfillment_type or "").strip().lower()
    if fulfillment not in FULFILLMENT_TYPES:
        raise ValidationError(f"Invalid fulfillment type: {fulfillment_type}")

    address = (delivery_address or "").strip() or None
    if fulfillment == "delivery" and not address:
        raise ValidationError("Delivery address is required for delivery orders")

    if decrement_stock is None:
        decrement_stock = ORDER_DECREMENT_STOCK

    # uma única query IN (...) para todos os produtos do carrinho
    product_ids = [product_id for product_id, _ in lines]
    rows = (
        db.query(Product)
        .filter(Product.id.in_(product_ids), Product.active.is_(True))
        .all()
    )
    products = {product.id: product for product in rows}

    priced_lines: list[tuple[Product, int, Decimal]] = []
    total = Decimal("0.00")
    for product_id, quantity in lines:
        product = products.get(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        if int(product.quantity or 0) < quantity:
            raise InsufficientStockError(f"Insufficient stock for {product.name}")
        unit_price = to_money(product.price)
        priced_lines.append((product, quantity, unit_price))
        total += unit_price * quantity

    total = total.quantize(CENTS, rounding=ROUND_HALF_UP)
    now = datetime.utcnow()
    estimated_ready_time = now + timedelta(hours=ORDER_PREPARATION_HOURS)

    order = Order(
        user_id=user_id,
        order_number=generate_order_number(now),
        status="pending",
        fulfillment_type=fulfillment,
        total_price=total,
        estimated_ready_time=estimated_ready_time,
        delivery_address=address if fulfillment == "delivery" else None,
        notes=(notes or "").strip() or None,
        created_at=now,
        updated_at=now,
    )

    db.add(order)
    try:
        db.flush()
        for product, quantity, unit_price in priced_lines:
            db.add(
                OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    quantity=quantity,
                    price_at_purchase=unit_price,
                )
            )
            if decrement_stock:
                _decrement_stock(db, product, quantity)
        db.commit()
    except _StockRaceLost as exc:
        db.rollback()
        logger.warning("Stock race lost product_id=%s user_id=%s", exc.product.id, user_id)
        raise InsufficientStockError(f"Insufficient stock for {exc.product.name}")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Order transaction failed user_id=%s", user_id)
        raise InternalError("Failed to create order")

    logger.info(
        "Order created order_id=%s order_number=%s user_id=%s items=%s total=%s",
        order.id,
        order.order_number,
        user_id,
        len(priced_lines),
        total,
    )
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "estimated_ready_time": estimated_ready_time,
    }


def list_user_orders(db: Session, user_id: int) -> list[Order]:
    return (
        db.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(desc(Order.created_at), desc(Order.id))
        .all()
    )


def get_user_order(db: Session, user: User, order_id: int) -> Order:
    # pedido de outro usuário responde igual a inexistente
    order = db.query(Order).filter(Order.id == order_id, Order.user_id == user.id).first()
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def get_order_items(db: Session, user: User, order_id: int) -> list[OrderItem]:
    order = db.query(Order).filter(Order.id == order_id).first()
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    AuthorizationService.ensure_order_owner(user=user, order=order)
    return (
        db.query(OrderItem)
        .filter(OrderItem.order_id == order.id)
        .order_by(OrderItem.id.asc())
        .all()
    )
