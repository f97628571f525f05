from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple, Union
import logging
import math

from sqlalchemy.orm import Session

from app.models.product import Product
from app.schemas.analytics import (
    AnalyticsSnapshot,
    CategorySlice,
    LowStockProduct,
    MonthlyTrendPoint,
    NamedCount,
    TopProduct,
)

logger = logging.getLogger(__name__)

Number = Union[int, float]

UNKNOWN = "Unknown"
LOW_STOCK_THRESHOLD = 20
TOP_PRODUCTS_LIMIT = 5
LOW_STOCK_LIMIT = 5
# Above this many low-stock items the dashboard flags the inventory
HEALTH_ATTENTION_THRESHOLD = 5

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# Only the $1000-$2000 bin is closed on both ends; exactly 2000 belongs to it.
PRICE_RANGES = [
    ("$0-$100", lambda price: 0 <= price < 100),
    ("$100-$500", lambda price: 100 <= price < 500),
    ("$500-$1000", lambda price: 500 <= price < 1000),
    ("$1000-$2000", lambda price: 1000 <= price <= 2000),
    ("$2000+", lambda price: price > 2000),
]


def to_number(value: Any) -> Number:
    """
    Parse a numeric-like value, returning 0 when it cannot be parsed.

    Integers pass through unchanged, strings are stripped and parsed as
    floats. None, empty or non-numeric strings, NaN and infinities all
    become 0.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if value is None:
        return 0
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return number


def to_quantity(value: Any) -> Number:
    """Coerce a quantity, narrowing integral values to int."""
    number = to_number(value)
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def utc_year_month(value: Any) -> Optional[Tuple[int, int]]:
    """
    Return the (year, month) of a timestamp in UTC.

    Accepts datetimes (naive ones are taken as UTC), ISO-8601 strings and
    epoch milliseconds. Returns None when the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        return None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    try:
        moment = moment.astimezone(timezone.utc)
    except OverflowError:
        return None
    return moment.year, moment.month


def _field(product: Any, *names: str) -> Any:
    """Read the first present field from a mapping or an object."""
    for name in names:
        if isinstance(product, Mapping):
            if name in product:
                return product[name]
        elif hasattr(product, name):
            return getattr(product, name)
    return None


class _Row(NamedTuple):
    id: Any
    name: str
    sku: Optional[str]
    category: str
    status: str
    price: Number
    quantity: Number
    value: Number
    created: Optional[Tuple[int, int]]


def _normalise(product: Any) -> _Row:
    price = to_number(_field(product, "price"))
    quantity = to_quantity(_field(product, "quantity"))
    sku = _field(product, "sku")
    return _Row(
        id=_field(product, "id"),
        name=str(_field(product, "name") or ""),
        sku=str(sku) if sku is not None else None,
        category=str(_field(product, "category") or UNKNOWN),
        status=str(_field(product, "status") or UNKNOWN),
        price=price,
        quantity=quantity,
        value=price * quantity,
        created=utc_year_month(_field(product, "created_at", "createdAt")),
    )


def is_low_stock(quantity: Number) -> bool:
    return 0 < quantity <= LOW_STOCK_THRESHOLD


def _category_distribution(rows: List[_Row]) -> List[CategorySlice]:
    groups = {}
    for row in rows:
        group = groups.setdefault(row.category, {"count": 0, "quantity": 0, "value": 0})
        group["count"] += 1
        group["quantity"] += row.quantity
        group["value"] += row.value

    return [
        CategorySlice(name=name, value=data["quantity"], count=data["count"], total_value=data["value"])
        for name, data in groups.items()
    ]


def _status_distribution(rows: List[_Row]) -> List[NamedCount]:
    counts = {}
    for row in rows:
        counts[row.status] = counts.get(row.status, 0) + 1
    return [NamedCount(name=name, value=count) for name, count in counts.items()]


def _price_range_distribution(rows: List[_Row]) -> List[NamedCount]:
    return [
        NamedCount(name=name, value=sum(1 for row in rows if in_range(row.price)))
        for name, in_range in PRICE_RANGES
    ]


def _monthly_trend(rows: List[_Row]) -> List[MonthlyTrendPoint]:
    """
    Build twelve Jan-Dec buckets for the UTC year of the first product.

    Products created in other years still exist in the collection but are
    not counted in any bucket.
    """
    added = {}
    for row in rows:
        if row.created is not None:
            added[row.created] = added.get(row.created, 0) + 1

    year = rows[0].created[0] if rows[0].created is not None else None

    trend = []
    cumulative = 0
    for index, month in enumerate(MONTHS):
        this_month = added.get((year, index + 1), 0) if year is not None else 0
        cumulative += this_month
        trend.append(MonthlyTrendPoint(month=month, products=cumulative, monthly_added=this_month))
    return trend


def compute_snapshot(products: Sequence[Any]) -> AnalyticsSnapshot:
    """
    Derive dashboard metrics from a product collection.

    Pure function of its input: the sequence is never mutated and every
    field is recomputed on each call. Products may be ORM objects, pydantic
    models or plain mappings; numeric fields are coerced with `to_number`.

    Args:
        products: Product snapshot, in the order it was loaded

    Returns:
        AnalyticsSnapshot, fully zeroed when the collection is empty
    """
    if not products:
        return AnalyticsSnapshot()

    rows = [_normalise(product) for product in products]

    total_products = len(rows)
    total_value = sum(row.value for row in rows)
    total_quantity = sum(row.quantity for row in rows)
    low_stock_items = sum(1 for row in rows if is_low_stock(row.quantity))
    out_of_stock_items = sum(1 for row in rows if row.quantity == 0)

    average_price = total_value / total_quantity if total_quantity > 0 else 0
    stock_utilization = (total_products - out_of_stock_items) / total_products * 100
    value_density = total_value / total_products
    stock_coverage = total_quantity / total_products

    # sorted() is stable, ties keep input order
    top_rows = sorted(rows, key=lambda row: row.value, reverse=True)[:TOP_PRODUCTS_LIMIT]
    low_rows = sorted(
        (row for row in rows if is_low_stock(row.quantity)),
        key=lambda row: row.quantity,
    )[:LOW_STOCK_LIMIT]

    return AnalyticsSnapshot(
        total_products=total_products,
        total_value=total_value,
        total_quantity=total_quantity,
        average_price=average_price,
        low_stock_items=low_stock_items,
        out_of_stock_items=out_of_stock_items,
        stock_utilization=stock_utilization,
        value_density=value_density,
        stock_coverage=stock_coverage,
        inventory_health="Needs Attention" if low_stock_items > HEALTH_ATTENTION_THRESHOLD else "Healthy",
        category_distribution=_category_distribution(rows),
        status_distribution=_status_distribution(rows),
        price_range_distribution=_price_range_distribution(rows),
        monthly_trend=_monthly_trend(rows),
        top_products=[
            TopProduct(name=row.name, value=row.value, quantity=row.quantity)
            for row in top_rows
        ],
        low_stock_products=[
            LowStockProduct(id=row.id, name=row.name, sku=row.sku, quantity=row.quantity)
            for row in low_rows
        ],
    )


class AnalyticsService:
    """
    Service class computing analytics over the stored product collection.

    The whole collection is loaded in insertion order and handed to
    `compute_snapshot`; nothing is cached between calls.
    """

    def __init__(self, db: Session):
        self.db = db

    def load_products(self) -> List[Product]:
        """Load every product ordered by ID."""
        return self.db.query(Product).order_by(Product.id.asc()).all()

    def get_snapshot(self) -> AnalyticsSnapshot:
        """Compute a snapshot of the current product collection."""
        products = self.load_products()
        logger.info(f"Computing analytics snapshot over {len(products)} products")
        return compute_snapshot(products)

    def get_low_stock_alerts(self) -> List[LowStockProduct]:
        """Return the low-stock alert list of the current snapshot."""
        return self.get_snapshot().low_stock_products
