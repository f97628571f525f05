from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from sqlalchemy.sql import func

from app.database import Base


class Product(Base):
    """
    Product model representing an item tracked in the inventory.

    Attributes:
        id: Unique identifier for the product
        name: Product name
        sku: Stock keeping unit, unique across the catalogue
        category: Optional category label
        status: Optional free-form status (e.g. "Available", "Discontinued")
        price: Unit price (must be non-negative)
        quantity: Units on hand (must be non-negative)
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    sku = Column(String(64), nullable=False, unique=True, index=True)
    category = Column(String(100), nullable=True, index=True)
    status = Column(String(50), nullable=True)
    price = Column(Float, nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Database-level constraints to ensure data integrity
    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_non_negative'),
        CheckConstraint('quantity >= 0', name='check_quantity_non_negative'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', quantity={self.quantity})>"
