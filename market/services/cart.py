# market/services/cart.py
# Cart aggregate: per-user cart, line merging and eager stock reservation.
import logging

from sqlalchemy.exc import IntegrityError

from market.core.errors import CartItemNotFound, ProductNotFound
from market.models.cart import Cart, CartItem
from market.models.product import Product
from market.schemas.cart import CartItemView
from market.services.base import BaseService, transactional
from market.services.inventory import InventoryLedger

logger = logging.getLogger(__name__)


class CartService(BaseService):

    def __init__(self, db, inventory: InventoryLedger | None = None):
        super().__init__(db)
        self.inventory = inventory or InventoryLedger(db)

    # --- lookups -------------------------------------------------------------

    def get_cart(self, user_id: int) -> Cart | None:
        return self.db.query(Cart).filter(Cart.user_id == user_id).first()

    def get_or_create_cart(self, user_id: int) -> Cart:
        """Get the user's cart or create it on first use."""
        cart = self.get_cart(user_id)
        if cart is not None:
            return cart
        try:
            with self.db.begin_nested():
                cart = Cart(user_id=user_id)
                self.db.add(cart)
                self.db.flush()
        except IntegrityError:
            # Another request created the cart first
            cart = self.get_cart(user_id)
            if cart is None:
                raise
            return cart
        logger.info(f"Created cart {cart.id} for user {user_id}")
        return cart

    def _get_product(self, product_id: int) -> Product:
        product = (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.deleted_at.is_(None))
            .first()
        )
        if product is None:
            raise ProductNotFound()
        return product

    def _get_item(self, cart_id: int, product_id: int) -> CartItem | None:
        return (
            self.db.query(CartItem)
            .filter(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
            .first()
        )

    def list_items(self, cart: Cart) -> list[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.cart_id == cart.id)
            .order_by(CartItem.id)
            .all()
        )

    # --- operations ------------------------------------------------------------

    @transactional("failed to add product to cart")
    def add_product(self, user_id: int, product_id: int, quantity: int = 1) -> CartItemView:
        """
        Add quantity units of a product to the user's cart.

        Stock is reserved first; if the reservation fails nothing is written.
        An existing line is incremented in one UPDATE and its stored price
        becomes the line total for the new quantity.
        """
        product = self._get_product(product_id)
        self.inventory.reserve_stock(product.id, quantity)

        cart = self.get_or_create_cart(user_id)
        if not self._increment_item(cart.id, product, quantity):
            try:
                with self.db.begin_nested():
                    self.db.add(CartItem(
                        cart_id=cart.id,
                        product_id=product.id,
                        quantity=quantity,
                        price=product.price * quantity,
                    ))
                    self.db.flush()
            except IntegrityError:
                # Another request inserted the same line first
                if not self._increment_item(cart.id, product, quantity):
                    raise

        item = self._get_item(cart.id, product.id)
        self.db.refresh(item)
        return self._view(product, item.quantity)

    def _increment_item(self, cart_id: int, product: Product, quantity: int) -> bool:
        updated = (
            self.db.query(CartItem)
            .filter(CartItem.cart_id == cart_id, CartItem.product_id == product.id)
            .update(
                {
                    CartItem.quantity: CartItem.quantity + quantity,
                    CartItem.price: product.price * (CartItem.quantity + quantity),
                },
                synchronize_session="fetch",
            )
        )
        return updated > 0

    @transactional("failed to delete product from cart")
    def decrement_item(self, user_id: int, product_id: int) -> CartItemView:
        """
        Take one unit of a product out of the cart and give it back to stock.

        The line is deleted when its quantity reaches 0; the returned view then
        has quantity 0.
        """
        cart = self.get_cart(user_id)
        item = self._get_item(cart.id, product_id) if cart is not None else None
        if item is None:
            raise CartItemNotFound()

        product = self.db.get(Product, product_id)
        lines = self.db.query(CartItem).filter(
            CartItem.cart_id == cart.id, CartItem.product_id == product_id
        )
        updated = lines.filter(CartItem.quantity > 1).update(
            {
                CartItem.quantity: CartItem.quantity - 1,
                CartItem.price: product.price * (CartItem.quantity - 1),
            },
            synchronize_session="fetch",
        )
        if updated:
            self.db.refresh(item)
            new_quantity = item.quantity
        else:
            if not lines.filter(CartItem.quantity == 1).delete(synchronize_session="fetch"):
                raise CartItemNotFound()
            new_quantity = 0
        self.inventory.restore_stock(product_id, 1)

        return self._view(product, new_quantity)

    def view(self, user_id: int) -> list[CartItemView]:
        """Current cart lines with the catalog's current name and unit price."""
        cart = self.get_cart(user_id)
        if cart is None:
            return []
        views = []
        for item in self.list_items(cart):
            product = self.db.get(Product, item.product_id)
            views.append(self._view(product, item.quantity))
        return views

    @transactional("failed to clear cart")
    def clear(self, user_id: int) -> int:
        """
        Empty the cart and put every reserved unit back in stock.

        Succeeds on an empty or missing cart. Returns the number of removed lines.
        """
        cart = self.get_cart(user_id)
        if cart is None:
            return 0
        lines = [(item.product_id, item.quantity) for item in self.list_items(cart)]
        removed = self.delete_all_items(cart)
        self.inventory.restore_stock_best_effort(lines)
        return removed

    def delete_all_items(self, cart: Cart) -> int:
        """Delete every line of the cart without touching stock (used by checkout)."""
        removed = (
            self.db.query(CartItem)
            .filter(CartItem.cart_id == cart.id)
            .delete(synchronize_session="fetch")
        )
        self.db.expire(cart, ["items"])
        return removed

    @staticmethod
    def _view(product: Product, quantity: int) -> CartItemView:
        return CartItemView(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.price,
            total_price=product.price * quantity,
        )
