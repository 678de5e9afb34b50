# market/services/checkout.py
# Checkout: turns the current cart into a pending order and empties the cart in one transaction.
import logging

from market.core.errors import ProductNotFound, ValidationError
from market.models.order import Order, OrderItem, OrderStatus
from market.models.product import Product
from market.services.base import BaseService, transactional
from market.services.cart import CartService
from market.services.payment import PAYMENT_SUCCESS, MockPaymentGateway, PaymentGateway, PaymentRequest

logger = logging.getLogger(__name__)


class CheckoutService(BaseService):

    def __init__(self, db, cart_service: CartService | None = None, payments: PaymentGateway | None = None):
        super().__init__(db)
        self.carts = cart_service or CartService(db)
        self.payments = payments or MockPaymentGateway()

    @transactional("failed to checkout cart")
    def checkout(
        self,
        user_id: int,
        shipping_address: str = "",
        payment_method: str | None = None,
        notes: str | None = None,
    ) -> Order:
        """
        Snapshot the cart into a new pending order, then clear the cart.

        Product names and prices are read from the catalog at this moment and
        copied onto the order items. Stock is not checked here: it was
        reserved when the items were added to the cart. Any failure rolls
        back the whole checkout and leaves the cart as it was.
        """
        cart = self.carts.get_cart(user_id)
        cart_items = self.carts.list_items(cart) if cart is not None else []
        if not cart_items:
            raise ValidationError("cart is empty")

        order_items = []
        total_amount = 0.0
        for item in cart_items:
            product = (
                self.db.query(Product)
                .filter(Product.id == item.product_id, Product.deleted_at.is_(None))
                .first()
            )
            if product is None:
                raise ProductNotFound(f"Product {item.product_id} is no longer available")
            subtotal = item.quantity * product.price
            order_items.append(OrderItem(
                product_id=product.id,
                product_name=product.name,
                quantity=item.quantity,
                price=product.price,
                subtotal=subtotal,
            ))
            total_amount += subtotal

        order = Order(
            user_id=user_id,
            total_amount=total_amount,
            status=OrderStatus.pending,
            shipping_address=shipping_address or "",
            payment_method=payment_method,
            notes=notes,
            items=order_items,
        )
        self.db.add(order)
        self.db.flush()

        if payment_method and total_amount == 0:
            # Nothing to collect
            order.payment_status = PAYMENT_SUCCESS
        elif payment_method:
            result = self.payments.process_payment(PaymentRequest(
                order_id=order.id,
                amount=total_amount,
                method=payment_method,
            ))
            order.payment_status = result.status
            order.payment_reference = result.transaction_id

        self.carts.delete_all_items(cart)
        self.db.flush()
        logger.info(
            f"Checkout of user {user_id}: order {order.id} with {len(order_items)} items, "
            f"total {total_amount}"
        )
        return order
