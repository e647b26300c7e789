from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)

from dispensary.core.database import Base

PRODUCT_CATEGORIES = (
    "flower",
    "edibles",
    "concentrates",
    "tinctures",
    "topicals",
    "accessories",
)


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        Index("ix_products_category_active", "category", "active"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(32), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)

    # potência em percentual
    thc_level = Column(Numeric(5, 2), nullable=True)
    cbd_level = Column(Numeric(5, 2), nullable=True)
    strain = Column(String(255), nullable=True)
    effects = Column(Text, nullable=True)  # JSON array serializado
    image = Column(String(500), nullable=True)

    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
