from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_user
from app.database import get_db
from app.schemas.analytics import AnalyticsSnapshot, LowStockProduct, RawProduct
from app.services.analytics_service import AnalyticsService, compute_snapshot

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
    dependencies=[Depends(require_user)]
)


@router.get(
    "/snapshot",
    response_model=AnalyticsSnapshot,
    summary="Inventory analytics",
    description="""
    Dashboard metrics over every stored product.

    - **Low stock**: quantity between 1 and 20 inclusive
    - **Price ranges**: $0-$100, $100-$500, $500-$1000, $1000-$2000 (inclusive), $2000+
    - **Monthly trend**: Jan-Dec of the UTC year of the first product, cumulative and per month
    """
)
def get_snapshot(db: Session = Depends(get_db)):
    """Compute analytics for the stored product collection."""
    return AnalyticsService(db).get_snapshot()


@router.post(
    "/snapshot",
    response_model=AnalyticsSnapshot,
    summary="Analytics for a submitted product list",
    description="Compute the same metrics over products sent in the request body. "
                "Quantity and price may be numbers or numeric strings; unparseable values count as 0."
)
def compute_snapshot_for(products: List[RawProduct]):
    """Compute analytics for client-supplied products."""
    return compute_snapshot(products)


@router.get(
    "/low-stock",
    response_model=List[LowStockProduct],
    summary="Low-stock alerts",
    description="Up to five low-stock products, lowest quantity first."
)
def get_low_stock_alerts(db: Session = Depends(get_db)):
    """Get products that need restocking."""
    return AnalyticsService(db).get_low_stock_alerts()
