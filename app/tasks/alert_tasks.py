import logging

from app.tasks.celery_app import celery_app
from app.database import SessionLocal
from app.models.product import Product
from app.services.analytics_service import is_low_stock

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="notify_low_stock")
def notify_low_stock(self, product_id: int) -> dict:
    """
    Background task raising a low-stock alert for a product.

    The product is re-read because its quantity may have changed between
    the request that queued the task and the worker picking it up. The
    alert is only raised if the product is still in the low-stock band.

    Args:
        product_id: ID of the product to check

    Returns:
        Dictionary with the alert result
    """
    db = SessionLocal()

    try:
        product = db.query(Product).filter(Product.id == product_id).first()

        if not product:
            logger.error(f"Product #{product_id} not found for low-stock alert")
            return {"status": "failed", "error": "Product not found"}

        if not is_low_stock(product.quantity):
            logger.info(f"Product #{product_id} restocked before alert, skipping")
            return {"status": "skipped", "product_id": product_id, "quantity": product.quantity}

        logger.warning(
            f"Low stock: product #{product.id} '{product.name}' (SKU {product.sku}) "
            f"has {product.quantity} left"
        )

        return {
            "status": "alerted",
            "product_id": product.id,
            "sku": product.sku,
            "quantity": product.quantity,
        }

    except Exception as e:
        logger.error(f"Error checking low stock for product #{product_id}: {e}")
        raise self.retry(exc=e, countdown=60, max_retries=3)

    finally:
        db.close()
