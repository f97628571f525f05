from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.api.deps import require_user
from app.database import get_db
from app.models.product import Product
from app.services.analytics_service import is_low_stock
from app.services.product_service import ProductService
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse
)
from app.tasks.alert_tasks import notify_low_stock
from app.utils.exceptions import DuplicateResourceError

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(require_user)]
)


def _queue_low_stock_alert(product: Product) -> None:
    if is_low_stock(product.quantity):
        notify_low_stock.delay(product.id)


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="""
    Create a new product.

    A low-stock alert is queued when the initial quantity is between 1 and 20.
    """
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new product.

    - **name**: Product name (required)
    - **sku**: Unique stock keeping unit (required)
    - **category** / **status**: Optional labels
    - **price**: Unit price, must be non-negative (required)
    - **quantity**: Units on hand, must be non-negative (required)
    """
    service = ProductService(db)
    try:
        product = service.create(product_data)
    except DuplicateResourceError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )

    _queue_low_stock_alert(product)
    return product


@router.get(
    "/",
    response_model=ProductListResponse,
    summary="List all products",
    description="Get a paginated list of products with optional search and category filter."
)
def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by product name or SKU"),
    category: Optional[str] = Query(None, description="Filter by category"),
    db: Session = Depends(get_db)
):
    """Get paginated list of products."""
    service = ProductService(db)
    products, total, total_pages = service.get_all(page, page_size, search, category)

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Get detailed information about a specific product."
)
def get_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    """Get a product by ID."""
    service = ProductService(db)
    product = service.get_by_id(product_id)

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )

    return product


@router.get(
    "/{product_id}/cached",
    summary="Get product from cache",
    description="Get product details from Redis cache (or database if not cached)."
)
def get_product_cached(
    product_id: int,
    db: Session = Depends(get_db)
):
    """
    Get product from cache.

    Returns cached data if available, otherwise fetches from database
    and caches the result.
    """
    service = ProductService(db)
    product_data = service.get_by_id_cached(product_id)

    if not product_data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )

    return product_data


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Update product details. Only provided fields will be updated."
)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a product.

    Partial updates are supported. Cache is invalidated after update, and a
    low-stock alert is queued when the resulting quantity is low.
    """
    service = ProductService(db)
    try:
        product = service.update(product_id, product_data)
    except DuplicateResourceError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )

    if product_data.quantity is not None:
        _queue_low_stock_alert(product)

    return product


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    description="Delete a product by ID. Associated cache is also cleared."
)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    """Delete a product."""
    service = ProductService(db)
    deleted = service.delete(product_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )

    return None
