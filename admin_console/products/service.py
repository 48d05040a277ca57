# admin_console/products/service.py
import logging
from typing import Any, Dict, List, Optional, Tuple, Type

from fastapi import UploadFile
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import NotFoundError, ValidationError
from ..media.lifecycle import MediaPlan, ProductMediaLifecycle
from ..media.storage import StagedUploads
from ..models.product import Product as ProductModel
from ..schemas.product import Product, ProductCreate, ProductUpdate
from .repository import ProductRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "price", "stock_quantity", "category_id")


def _clean_form(form: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """Drop fields the client left out or blank."""
    data = {}
    for key, value in form.items():
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            continue
        data[key] = value
    return data


def _validate(schema: Type[BaseModel], data: Dict[str, Any]) -> BaseModel:
    try:
        return schema(**data)
    except PydanticValidationError as e:
        problems = []
        for error in e.errors():
            field = ".".join(str(p) for p in error.get("loc", ()))
            problems.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
        raise ValidationError("; ".join(problems)) from e


class ProductService:
    def __init__(self, repository: ProductRepository, lifecycle: ProductMediaLifecycle):
        self.repository = repository
        self.lifecycle = lifecycle

    # --- Reads ---

    def to_schema(self, product: ProductModel) -> Product:
        """Row -> API shape: gallery decoded, paths turned into public URLs."""
        codec = self.lifecycle.codec
        return Product(
            id=product.id,
            category_id=product.category_id,
            name=product.name,
            description=product.description,
            price=product.price,
            stock_quantity=product.stock_quantity,
            thumbnail_url=codec.to_public_url(product.thumbnail_url),
            additional_images=codec.public_gallery(product.additional_images),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    def list_products(self) -> List[Product]:
        return [self.to_schema(p) for p in self.repository.list()]

    def get_product(self, product_id: int) -> Product:
        return self.to_schema(self._require(product_id))

    def _require(self, product_id: int) -> ProductModel:
        product = self.repository.get(product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    def _check_category(self, category_id: int) -> None:
        if not self.repository.category_exists(category_id):
            raise ValidationError(f"Category {category_id} does not exist")

    # --- Writes ---

    async def stage_uploads(
        self,
        thumbnail: Optional[List[UploadFile]],
        additional_images: Optional[List[UploadFile]],
    ) -> StagedUploads:
        return await self.lifecycle.storage.stage(thumbnail, additional_images)

    def add_product(self, form: Dict[str, Optional[str]], staged: StagedUploads) -> Tuple[int, MediaPlan]:
        try:
            data = _clean_form(form)
            missing = [name for name in REQUIRED_FIELDS if name not in data]
            if missing:
                raise ValidationError(f"Missing required fields: {', '.join(missing)}")

            payload = _validate(ProductCreate, data)
            self._check_category(payload.category_id)

            plan = self.lifecycle.plan_create(staged)
            product_id = self.repository.insert({**payload.model_dump(), **plan.values()})
        except Exception:
            self.lifecycle.discard(staged)
            raise

        logger.info(f"Created product {product_id} ({len(plan.additional_images)} additional images)")
        return product_id, plan

    def update_product(
        self,
        product_id: int,
        form: Dict[str, Optional[str]],
        staged: StagedUploads,
        retained: Optional[str] = None,
    ) -> Tuple[Product, MediaPlan]:
        """
        Apply a partial update. Only supplied fields change; the image
        columns are always recomputed from the retained set and new uploads.
        """
        try:
            product = self._require(product_id)

            payload = _validate(ProductUpdate, _clean_form(form))
            fields = payload.model_dump(exclude_unset=True)
            if not fields and not staged and retained is None:
                raise ValidationError("No fields to update")
            if "category_id" in fields:
                self._check_category(fields["category_id"])

            plan = self.lifecycle.plan_update(product, staged, retained)
            updated = self.repository.update(product_id, {**fields, **plan.values()})
        except Exception:
            self.lifecycle.discard(staged)
            raise

        logger.info(f"Updated product {product_id}; {len(plan.files_to_delete)} image(s) to remove")
        return self.to_schema(updated), plan

    def delete_product(self, product_id: int) -> MediaPlan:
        product = self._require(product_id)
        plan = self.lifecycle.plan_delete(product)
        self.repository.delete(product_id)
        logger.info(f"Deleted product {product_id}; {len(plan.files_to_delete)} image(s) to remove")
        return plan
