import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import InternalError, NotFoundError, ValidationError
from ..models.category import Category as CategoryModel
from ..models.product import Product as ProductModel
from ..schemas.category import Category, CategoryCreate, CategoryCreated, CategoryUpdate
from ..schemas.product import Message

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/categories", tags=["categories"])


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Error {action}: {e}")
        raise InternalError("Internal server error") from e


def _get_or_404(db: Session, category_id: int) -> CategoryModel:
    category = db.get(CategoryModel, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


@router.get("", response_model=List[Category])
async def get_all_categories(db: Session = Depends(get_db)):
    return (
        db.query(CategoryModel)
        .order_by(CategoryModel.created_at.desc(), CategoryModel.id.desc())
        .all()
    )


@router.post("", response_model=CategoryCreated, status_code=status.HTTP_201_CREATED)
async def add_category(category: CategoryCreate, db: Session = Depends(get_db)):
    db_category = CategoryModel(name=category.name, description=category.description or None)
    db.add(db_category)
    _commit(db, "adding category")
    db.refresh(db_category)

    return CategoryCreated(message="Category added successfully", id=db_category.id)


@router.put("/{category_id}", response_model=Message)
async def update_category(category_id: int, category: CategoryUpdate, db: Session = Depends(get_db)):
    db_category = _get_or_404(db, category_id)
    db_category.name = category.name
    db_category.description = category.description or None
    _commit(db, "updating category")

    return Message(message="Category updated successfully")


@router.delete("/{category_id}", response_model=Message)
async def delete_category(category_id: int, db: Session = Depends(get_db)):
    db_category = _get_or_404(db, category_id)

    # No cascade: products must be moved or deleted first
    in_use = db.query(ProductModel).filter(ProductModel.category_id == category_id).count()
    if in_use:
        raise ValidationError(f"Category is still used by {in_use} product(s)")

    db.delete(db_category)
    _commit(db, "deleting category")

    return Message(message="Category deleted successfully")
