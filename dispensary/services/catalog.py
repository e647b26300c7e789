from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from dispensary.core.errors import NotFoundError, ValidationError
from dispensary.models.product import PRODUCT_CATEGORIES, Product

logger = logging.getLogger(__name__)


def list_products(db: Session, category: str | None = None) -> list[Product]:
    query = db.query(Product).filter(Product.active.is_(True))
    if category:
        normalized = category.strip().lower()
        if normalized not in PRODUCT_CATEGORIES:
            raise ValidationError(f"Invalid category: {category}")
        query = query.filter(Product.category == normalized)
    return query.order_by(Product.name.asc(), Product.id.asc()).all()


def get_product(db: Session, product_id: int) -> Product:
    product = (
        db.query(Product)
        .filter(Product.id == product_id, Product.active.is_(True))
        .first()
    )
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def get_products_by_ids(db: Session, product_ids: Iterable[int]) -> list[Product]:
    ids = list(dict.fromkeys(int(product_id) for product_id in product_ids))
    if not ids:
        return []
    rows = (
        db.query(Product)
        .filter(Product.id.in_(ids), Product.active.is_(True))
        .all()
    )
    by_id = {product.id: product for product in rows}
    # mesma ordem pedida pelo carrinho; ids ausentes são ignorados
    return [by_id[product_id] for product_id in ids if product_id in by_id]
