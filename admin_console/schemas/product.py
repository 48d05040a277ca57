from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    stock_quantity: int = Field(ge=0)
    category_id: int


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[int] = None


class Product(BaseModel):
    id: int
    category_id: int
    name: str
    description: Optional[str] = None
    price: float
    stock_quantity: int
    thumbnail_url: str                      # public URL (fallback image when absent)
    additional_images: List[str] = []       # public URLs
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductCreated(BaseModel):
    message: str
    id: int


class ProductUpdated(BaseModel):
    message: str
    product: Product


class Message(BaseModel):
    message: str
