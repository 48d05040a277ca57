from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Request, UploadFile, status

from ..deps import get_product_service
from ..schemas.product import Message, Product, ProductCreated, ProductUpdated
from .service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[Product])
async def get_all_products(service: ProductService = Depends(get_product_service)):
    return service.list_products()


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return service.get_product(product_id)


@router.post("", response_model=ProductCreated, status_code=status.HTTP_201_CREATED)
async def add_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    stock_quantity: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    thumbnail: Optional[List[UploadFile]] = File(None),
    additional_images: Optional[List[UploadFile]] = File(None),
    service: ProductService = Depends(get_product_service),
):
    """
    Create a product from a multipart form.

    Images are validated and written first; a rejected file fails the whole
    request before anything reaches the database.
    """
    staged = await service.stage_uploads(thumbnail, additional_images)
    product_id, _ = service.add_product(
        {
            "name": name,
            "description": description,
            "price": price,
            "stock_quantity": stock_quantity,
            "category_id": category_id,
        },
        staged,
    )
    return ProductCreated(message="Product added successfully", id=product_id)


@router.patch("/{product_id}", response_model=ProductUpdated)
async def update_product(
    product_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    stock_quantity: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    existing_additional_images: Optional[str] = Form(None),
    thumbnail: Optional[List[UploadFile]] = File(None),
    additional_images: Optional[List[UploadFile]] = File(None),
    service: ProductService = Depends(get_product_service),
):
    """
    Partially update a product.

    existing_additional_images lists the gallery images to keep (JSON array
    or comma separated). Gallery images left out of it are removed, new
    uploads are appended after the kept ones. Replaced files are deleted
    after the response has been sent.
    """
    # An empty value still means "keep none of the current gallery"
    if existing_additional_images is None and "existing_additional_images" in await request.form():
        existing_additional_images = ""

    staged = await service.stage_uploads(thumbnail, additional_images)
    product, plan = service.update_product(
        product_id,
        {
            "name": name,
            "description": description,
            "price": price,
            "stock_quantity": stock_quantity,
            "category_id": category_id,
        },
        staged,
        retained=existing_additional_images,
    )
    background_tasks.add_task(service.lifecycle.apply, plan)

    return ProductUpdated(message="Product updated successfully", product=product)


@router.delete("/{product_id}", response_model=Message)
async def delete_product(
    product_id: int,
    background_tasks: BackgroundTasks,
    service: ProductService = Depends(get_product_service),
):
    plan = service.delete_product(product_id)
    # Files go after the row; a failed unlink only leaves a stray file behind
    background_tasks.add_task(service.lifecycle.apply, plan)

    return Message(message="Product deleted successfully")
