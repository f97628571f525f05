from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, Union


class CategorySlice(BaseModel):
    """Quantity, count and value of one category."""
    name: str
    value: Union[int, float] = Field(..., description="Total quantity in the category")
    count: int
    total_value: float


class NamedCount(BaseModel):
    """A labelled count, used for status and price-range charts."""
    name: str
    value: int


class MonthlyTrendPoint(BaseModel):
    """Products added in one month plus the running total."""
    month: str
    products: int = Field(..., description="Cumulative products up to this month")
    monthly_added: int


class TopProduct(BaseModel):
    name: str
    value: float
    quantity: Union[int, float]


class LowStockProduct(BaseModel):
    id: Optional[Union[int, str]] = None
    name: str
    sku: Optional[str] = None
    quantity: Union[int, float]


class AnalyticsSnapshot(BaseModel):
    """Dashboard metrics derived from the full product collection."""
    total_products: int = 0
    total_value: float = 0
    total_quantity: Union[int, float] = 0
    average_price: float = 0
    low_stock_items: int = 0
    out_of_stock_items: int = 0
    stock_utilization: float = 0
    value_density: float = 0
    stock_coverage: float = 0
    inventory_health: str = "Healthy"
    category_distribution: list[CategorySlice] = []
    status_distribution: list[NamedCount] = []
    price_range_distribution: list[NamedCount] = []
    monthly_trend: list[MonthlyTrendPoint] = []
    top_products: list[TopProduct] = []
    low_stock_products: list[LowStockProduct] = []


class RawProduct(BaseModel):
    """
    Product record as submitted by a client for ad-hoc analytics.

    Numeric fields are accepted as numbers or strings and coerced by the
    aggregator, so no numeric validation happens here.
    """
    id: Optional[Union[int, str]] = None
    name: str = ""
    sku: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    price: Optional[Union[float, str]] = None
    quantity: Optional[Union[int, float, str]] = None
    created_at: Optional[Union[datetime, str]] = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)
