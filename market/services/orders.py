# market/services/orders.py
# Order state machine: status transitions, cancellation and the stock they give back.
import logging

from sqlalchemy.orm import selectinload

from market.core.errors import Forbidden, InvalidTransition, OrderNotFound, ValidationError
from market.models.order import Order, OrderStatus
from market.services.base import BaseService, transactional
from market.services.inventory import InventoryLedger

logger = logging.getLogger(__name__)


class OrderService(BaseService):

    def __init__(self, db, inventory: InventoryLedger | None = None):
        super().__init__(db)
        self.inventory = inventory or InventoryLedger(db)

    def get_order(self, order_id: int) -> Order:
        order = (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.id == order_id)
            .first()
        )
        if order is None:
            raise OrderNotFound()
        return order

    def orders_for_user(self, user_id: int) -> list[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.user_id == user_id)
            .order_by(Order.id.desc())
            .all()
        )

    def all_orders(self) -> list[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .order_by(Order.id.desc())
            .all()
        )

    @transactional("failed to update order status")
    def transition(self, order_id: int, target) -> tuple[Order, OrderStatus]:
        """
        Move an order to target status.

        Returns:
            (updated order, previous status)

        Raises:
            OrderNotFound, ValidationError (unknown status), InvalidTransition
        """
        try:
            target = OrderStatus(target)
        except ValueError:
            raise ValidationError(f"invalid status: {target}")

        order = self.get_order(order_id)
        previous = self._apply(order, target)
        return order, previous

    @transactional("failed to cancel order")
    def cancel(self, order_id: int, user_id: int) -> Order:
        """Cancel an order on behalf of its owner; stock of every item is given back."""
        order = self.get_order(order_id)
        if order.user_id != user_id:
            raise Forbidden("cannot cancel another user's order")
        self._apply(order, OrderStatus.cancelled)
        return order

    def _apply(self, order: Order, target: OrderStatus) -> OrderStatus:
        current = OrderStatus(order.status)
        if not current.can_transition_to(target):
            raise InvalidTransition(
                f"invalid transition: cannot change from '{current.value}' to '{target.value}'"
            )

        # Conditional on the status we validated against: a concurrent change makes this a no-op
        updated = (
            self.db.query(Order)
            .filter(Order.id == order.id, Order.status == current)
            .update({Order.status: target}, synchronize_session="fetch")
        )
        if updated == 0:
            raise InvalidTransition(
                f"order {order.id} changed status concurrently, cannot move it to '{target.value}'"
            )

        if target is OrderStatus.cancelled:
            failed = self.inventory.restore_stock_best_effort(
                (item.product_id, item.quantity) for item in order.items
            )
            if failed:
                logger.warning(f"Order {order.id} cancelled with unrestored stock for products {failed}")

        self.db.refresh(order)
        logger.info(f"Order {order.id}: {current.value} -> {target.value}")
        return current
