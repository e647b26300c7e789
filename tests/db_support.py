"""Banco SQLite em memória compartilhado entre TestClient e asserts."""

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dispensary.core.database import Base
import dispensary.models  # noqa: F401
from dispensary.models.product import Product
from dispensary.models.user import User
from tests.fixtures_data import ADMIN, CUSTOMER, OTHER_CUSTOMER, PRODUCTS


def build_session() -> Session:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return testing_session_local()


def seed_users(db: Session) -> tuple[User, User, User]:
    customer = User(**CUSTOMER)
    other = User(**OTHER_CUSTOMER)
    admin = User(**ADMIN)
    db.add_all([customer, other, admin])
    db.commit()
    return customer, other, admin


def seed_products(db: Session) -> list[Product]:
    products = [Product(**data) for data in PRODUCTS]
    db.add_all(products)
    db.commit()
    return products
