from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    sku: str = Field(..., min_length=1, max_length=64, description="Stock keeping unit")
    category: Optional[str] = Field(None, max_length=100, description="Product category")
    status: Optional[str] = Field(None, max_length=50, description="Product status")
    price: float = Field(..., ge=0, description="Unit price (must be non-negative)")
    quantity: int = Field(..., ge=0, description="Units on hand (must be non-negative)")


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    pass


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Product name")
    sku: Optional[str] = Field(None, min_length=1, max_length=64, description="Stock keeping unit")
    category: Optional[str] = Field(None, max_length=100, description="Product category")
    status: Optional[str] = Field(None, max_length=50, description="Product status")
    price: Optional[float] = Field(None, ge=0, description="Unit price")
    quantity: Optional[int] = Field(None, ge=0, description="Units on hand")


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for paginated product list response."""
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
