"""Tests for the low-stock alert task."""
import pytest

from app.models.product import Product
from app.tasks import alert_tasks


@pytest.fixture
def task_db(db_session, session_factory, monkeypatch):
    """Point the task's session factory at the test database."""
    monkeypatch.setattr(alert_tasks, "SessionLocal", session_factory)
    return db_session


def _add_product(db, quantity):
    product = Product(name="Cable", sku="CBL-1", price=4.5, quantity=quantity)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def test_alert_for_low_stock_product(task_db, caplog):
    """Test a low-stock product raises an alert."""
    product = _add_product(task_db, quantity=3)

    with caplog.at_level("WARNING", logger="app.tasks.alert_tasks"):
        result = alert_tasks.notify_low_stock(product.id)

    assert result == {"status": "alerted", "product_id": product.id, "sku": "CBL-1", "quantity": 3}
    assert "CBL-1" in caplog.text


def test_alert_skipped_after_restock(task_db):
    """Test no alert is raised when the product was restocked meanwhile."""
    product = _add_product(task_db, quantity=50)

    result = alert_tasks.notify_low_stock(product.id)

    assert result["status"] == "skipped"


def test_alert_for_missing_product(task_db):
    """Test a missing product fails without retrying."""
    result = alert_tasks.notify_low_stock(9999)

    assert result == {"status": "failed", "error": "Product not found"}
