# market/services/catalog.py
# Products and categories: public reads and admin maintenance.
import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from market.core.errors import CategoryNotFound, Conflict, ProductNotFound
from market.models.product import Category, Product
from market.schemas.catalog import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
from market.services.base import BaseService, transactional
from market.services.inventory import InventoryLedger

logger = logging.getLogger(__name__)


class CatalogService(BaseService):

    def __init__(self, db, inventory: InventoryLedger | None = None):
        super().__init__(db)
        self.inventory = inventory or InventoryLedger(db)

    def _live_products(self):
        return (
            self.db.query(Product)
            .options(joinedload(Product.category))
            .filter(Product.deleted_at.is_(None))
        )

    # --- products ------------------------------------------------------------

    def list_products(self) -> list[Product]:
        return self._live_products().order_by(Product.id).all()

    def get_product(self, product_id: int) -> Product:
        product = self._live_products().filter(Product.id == product_id).first()
        if product is None:
            raise ProductNotFound()
        return product

    def search_products(self, name: str) -> list[Product]:
        """Case-insensitive substring match on the product name."""
        escaped = name.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        products = (
            self._live_products()
            .filter(func.lower(Product.name).like(pattern, escape="\\"))
            .order_by(Product.id)
            .all()
        )
        if not products:
            raise ProductNotFound()
        return products

    def products_by_category(self, category: str) -> list[Product]:
        """Products of a category given by id ("3") or by name ("Books")."""
        query = self._live_products()
        if category.isdigit():
            query = query.filter(Product.category_id == int(category))
        else:
            query = query.join(Category, Product.category_id == Category.id).filter(
                func.lower(Category.name) == category.lower()
            )
        products = query.order_by(Product.id).all()
        if not products:
            raise ProductNotFound()
        return products

    def _check_product_name(self, name: str, exclude_id: int | None = None) -> None:
        query = self.db.query(Product.id).filter(Product.name == name, Product.deleted_at.is_(None))
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first() is not None:
            raise Conflict("product name already registered")

    def _check_category_exists(self, category_id: int | None) -> None:
        if category_id is not None and self.db.get(Category, category_id) is None:
            raise CategoryNotFound()

    @transactional("failed to create product")
    def create_product(self, data: ProductCreate) -> Product:
        self._check_product_name(data.name)
        self._check_category_exists(data.category_id)
        product = Product(**data.model_dump())
        self.db.add(product)
        self.db.flush()
        logger.info(f"Created product {product.id} ({product.name}) with stock {product.stock}")
        return product

    @transactional("failed to update product")
    def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        """Update catalog fields. restock adds units through the inventory ledger."""
        product = self.get_product(product_id)
        changes = data.model_dump(exclude_unset=True)
        restock = changes.pop("restock", None)

        if "name" in changes and changes["name"] is not None:
            self._check_product_name(changes["name"], exclude_id=product.id)
        if "category_id" in changes:
            self._check_category_exists(changes["category_id"])
        for field, value in changes.items():
            if value is None and field in ("name", "price"):
                continue
            setattr(product, field, value)
        self.db.flush()

        if restock:
            self.inventory.restore_stock(product.id, restock)
        self.db.refresh(product)
        return product

    @transactional("failed to delete product")
    def delete_product(self, product_id: int) -> None:
        product = self.get_product(product_id)
        product.deleted_at = datetime.utcnow()
        logger.info(f"Deleted product {product_id}")

    # --- categories ----------------------------------------------------------

    def list_categories(self) -> list[Category]:
        return self.db.query(Category).order_by(Category.id).all()

    def get_category(self, category_id: int) -> Category:
        category = self.db.get(Category, category_id)
        if category is None:
            raise CategoryNotFound()
        return category

    def _check_category_name(self, name: str, exclude_id: int | None = None) -> None:
        query = self.db.query(Category.id).filter(func.lower(Category.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first() is not None:
            raise Conflict("category name already exists")

    @transactional("failed to create category")
    def create_category(self, data: CategoryCreate) -> Category:
        self._check_category_name(data.name)
        category = Category(name=data.name, description=data.description)
        self.db.add(category)
        self.db.flush()
        return category

    @transactional("failed to update category")
    def update_category(self, category_id: int, data: CategoryUpdate) -> Category:
        category = self.get_category(category_id)
        if data.name is not None:
            self._check_category_name(data.name, exclude_id=category.id)
            category.name = data.name
        if data.description is not None:
            category.description = data.description
        self.db.flush()
        return category

    @transactional("failed to delete category")
    def delete_category(self, category_id: int) -> None:
        """Delete a category; its products stay in the catalog without a category."""
        category = self.get_category(category_id)
        detached = (
            self.db.query(Product)
            .filter(Product.category_id == category.id)
            .update({Product.category_id: None}, synchronize_session="fetch")
        )
        self.db.delete(category)
        logger.info(f"Deleted category {category_id}, detached {detached} products")
