from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from .database import get_db
from .media.lifecycle import ProductMediaLifecycle
from .products.repository import ProductRepository
from .products.service import ProductService


def add_cors(app: FastAPI, origins: Optional[List[str]] = None):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )


def get_media_lifecycle(request: Request) -> ProductMediaLifecycle:
    return request.app.state.media_lifecycle


def get_product_service(
    db: Session = Depends(get_db),
    lifecycle: ProductMediaLifecycle = Depends(get_media_lifecycle),
) -> ProductService:
    return ProductService(ProductRepository(db), lifecycle)
