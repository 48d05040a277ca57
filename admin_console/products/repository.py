# admin_console/products/repository.py
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import InternalError
from ..models.category import Category
from ..models.product import Product

logger = logging.getLogger(__name__)


class ProductRepository:
    """Row access for products. Every write commits on its own."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: Exception) -> InternalError:
        self.db.rollback()
        logger.exception(f"Database error while trying to {action}: {exc}")
        return InternalError("Internal server error")

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def list(self) -> List[Product]:
        query = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        return list(self.db.execute(query).scalars())

    def insert(self, fields: dict) -> int:
        product = Product(**fields)
        try:
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
        except SQLAlchemyError as e:
            raise self._fail("insert a product", e) from e
        return product.id

    def update(self, product_id: int, fields: dict) -> Product:
        product = self.get(product_id)
        if product is None:
            raise InternalError(f"Product {product_id} disappeared during update")
        for key, value in fields.items():
            setattr(product, key, value)
        try:
            self.db.commit()
            self.db.refresh(product)
        except SQLAlchemyError as e:
            raise self._fail(f"update product {product_id}", e) from e
        return product

    def delete(self, product_id: int) -> None:
        product = self.get(product_id)
        if product is None:
            return
        try:
            self.db.delete(product)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(f"delete product {product_id}", e) from e

    def category_exists(self, category_id: int) -> bool:
        return self.db.get(Category, category_id) is not None
