# market/services/inventory.py
# Inventory ledger: the only code allowed to change Product.stock.
import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from market.core.errors import MarketError, OutOfStock, ProductNotFound, ValidationError
from market.models.product import Product
from market.services.base import BaseService

logger = logging.getLogger(__name__)

# Upper bound for a single stock movement
MAX_QUANTITY = 1_000_000


class InventoryLedger(BaseService):
    """
    Atomic stock counters.

    Each operation is a single conditional UPDATE, so concurrent requests on
    the same product can never oversell. Methods run inside the caller's
    transaction and do not commit.
    """

    @staticmethod
    def _check_quantity(quantity: int) -> None:
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError("quantity must be a positive integer")
        if quantity > MAX_QUANTITY:
            raise ValidationError(f"quantity must not exceed {MAX_QUANTITY}")

    def reserve_stock(self, product_id: int, quantity: int) -> None:
        """Decrement stock by quantity if at least that much is available."""
        self._check_quantity(quantity)
        updated = (
            self.db.query(Product)
            .filter(
                Product.id == product_id,
                Product.deleted_at.is_(None),
                Product.stock >= quantity,
            )
            .update({Product.stock: Product.stock - quantity}, synchronize_session="fetch")
        )
        if updated == 0:
            exists = (
                self.db.query(Product.id)
                .filter(Product.id == product_id, Product.deleted_at.is_(None))
                .first()
            )
            if exists is None:
                raise ProductNotFound()
            logger.info(f"Stock reservation refused: product {product_id}, quantity {quantity}")
            raise OutOfStock(f"insufficient stock for product {product_id}")
        logger.info(f"Reserved stock: product {product_id}, quantity {quantity}")

    def restore_stock(self, product_id: int, quantity: int) -> None:
        """Put quantity units back. Soft-deleted products still get their units back."""
        self._check_quantity(quantity)
        updated = (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .update({Product.stock: Product.stock + quantity}, synchronize_session="fetch")
        )
        if updated == 0:
            raise ProductNotFound()
        logger.info(f"Restored stock: product {product_id}, quantity {quantity}")

    def restore_stock_best_effort(self, lines: Iterable[tuple[int, int]]) -> list[int]:
        """
        Restore (product_id, quantity) pairs, each in its own savepoint.

        A failed restore is logged as a warning with product id and quantity
        for later reconciliation and never interrupts the caller.

        Returns:
            Ids of the products whose restore failed.
        """
        failed = []
        for product_id, quantity in lines:
            try:
                with self.db.begin_nested():
                    self.restore_stock(product_id, quantity)
            except (MarketError, SQLAlchemyError) as e:
                logger.warning(
                    f"Failed to restore stock: product {product_id}, quantity {quantity}: {e}"
                )
                failed.append(product_id)
        return failed
