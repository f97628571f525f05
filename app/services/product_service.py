from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List, Tuple
import math
import logging

from app.models.product import Product
from app.schemas.product import ProductCreate, ProductUpdate
from app.utils.cache import product_cache
from app.utils.exceptions import DuplicateResourceError

logger = logging.getLogger(__name__)


class ProductService:
    """
    Service class for Product CRUD operations.

    This service handles:
    - Creating new products
    - Reading products (with caching)
    - Updating products
    - Deleting products
    - Cache invalidation
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Args:
            product_data: Product creation data

        Returns:
            Created product instance

        Raises:
            DuplicateResourceError: If the SKU is already in use
        """
        product = Product(**product_data.model_dump())
        self.db.add(product)
        self._commit(product_data.sku)
        self.db.refresh(product)
        return product

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """
        Get a product by ID and refresh its cache entry.

        Args:
            product_id: Product ID to look up

        Returns:
            Product instance or None if not found
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if product:
            product_cache.set(product.id, self._to_dict(product))

        return product

    def get_by_id_cached(self, product_id: int) -> Optional[dict]:
        """
        Get product details from cache or database.
        Returns a dictionary (suitable for API response).

        Args:
            product_id: Product ID to look up

        Returns:
            Product data as dictionary or None
        """
        cached = product_cache.get(product_id)
        if cached:
            return cached

        product = self.db.query(Product).filter(Product.id == product_id).first()

        if product:
            product_dict = self._to_dict(product)
            product_cache.set(product.id, product_dict)
            return product_dict

        return None

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = None,
        category: str = None
    ) -> Tuple[List[Product], int, int]:
        """
        Get paginated list of products.

        Args:
            page: Page number (1-indexed)
            page_size: Number of items per page
            search: Optional search term matched against name and SKU
            category: Optional exact category filter

        Returns:
            Tuple of (products list, total count, total pages)
        """
        query = self.db.query(Product)

        if search:
            pattern = f"%{search}%"
            query = query.filter(Product.name.ilike(pattern) | Product.sku.ilike(pattern))

        if category:
            query = query.filter(Product.category == category)

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        products = query.order_by(Product.id.desc()).offset(offset).limit(page_size).all()

        return products, total, total_pages

    def update(self, product_id: int, product_data: ProductUpdate) -> Optional[Product]:
        """
        Update an existing product.

        Args:
            product_id: ID of product to update
            product_data: Update data (only non-None fields are updated)

        Returns:
            Updated product or None if not found

        Raises:
            DuplicateResourceError: If the new SKU is already in use
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            return None

        update_data = product_data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if value is not None:
                setattr(product, field, value)

        self._commit(product.sku)
        self.db.refresh(product)

        self._invalidate_cache(product_id)

        return product

    def delete(self, product_id: int) -> bool:
        """
        Delete a product.

        Args:
            product_id: ID of product to delete

        Returns:
            True if deleted, False if not found
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            return False

        self.db.delete(product)
        self.db.commit()

        self._invalidate_cache(product_id)

        return True

    def _commit(self, sku: str) -> None:
        """Commit, mapping a unique SKU violation to a duplicate error."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error saving product '{sku}': {e.orig}")
            raise DuplicateResourceError(f"Product with SKU '{sku}' already exists")

    @staticmethod
    def _to_dict(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "sku": product.sku,
            "category": product.category,
            "status": product.status,
            "price": product.price,
            "quantity": product.quantity,
            "created_at": str(product.created_at),
            "updated_at": str(product.updated_at),
        }

    def _invalidate_cache(self, product_id: int) -> None:
        """Invalidate cache for a product."""
        product_cache.delete(product_id)
