from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dispensary.core.database import get_db
from dispensary.core.formatting import iso, json_list, money
from dispensary.models.product import Product
from dispensary.services import catalog

router = APIRouter(prefix="/api/products", tags=["products"])


def _product_to_dict(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "category": product.category,
        "price": money(product.price),
        "quantity": product.quantity,
        "thc_level": money(product.thc_level),
        "cbd_level": money(product.cbd_level),
        "strain": product.strain,
        "effects": json_list(product.effects),
        "image": product.image,
        "active": product.active,
        "created_at": iso(product.created_at),
    }


@router.get("")
def list_products(
    category: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    return [_product_to_dict(product) for product in catalog.list_products(db, category)]


# precisa vir antes de /{product_id}
@router.get("/by-ids")
def get_products_by_ids(
    ids: List[int] = Query(default=[]),
    db: Session = Depends(get_db),
):
    return [_product_to_dict(product) for product in catalog.get_products_by_ids(db, ids)]


@router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _product_to_dict(catalog.get_product(db, product_id))
