# market/api/deps.py
# Per-request service construction: every service gets the request's session.
from fastapi import Depends
from sqlalchemy.orm import Session

from market.core.security import get_db
from market.services.cart import CartService
from market.services.catalog import CatalogService
from market.services.checkout import CheckoutService
from market.services.inventory import InventoryLedger
from market.services.orders import OrderService
from market.services.payment import MockPaymentGateway, PaymentGateway
from market.services.users import UserService


def get_payment_gateway() -> PaymentGateway:
    return MockPaymentGateway()


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db, InventoryLedger(db))


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db, InventoryLedger(db))


def get_checkout_service(
    db: Session = Depends(get_db),
    payments: PaymentGateway = Depends(get_payment_gateway),
) -> CheckoutService:
    return CheckoutService(db, CartService(db, InventoryLedger(db)), payments)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db, InventoryLedger(db))
