# market/api/user.py
# Authenticated customer routes: profile, cart and own orders.
from fastapi import APIRouter, Body, Depends, Query

from market.api.deps import get_cart_service, get_checkout_service, get_order_service, get_user_service
from market.core.security import TokenClaims, get_current_claims
from market.schemas.common import ok
from market.schemas.order import CheckoutRequest, OrderOut
from market.schemas.user import ProfileUpdateRequest, UserOut
from market.services.cart import CartService
from market.services.checkout import CheckoutService
from market.services.inventory import MAX_QUANTITY
from market.services.orders import OrderService
from market.services.users import UserService

router = APIRouter(prefix="/user", dependencies=[Depends(get_current_claims)])


# --- profile -----------------------------------------------------------------

@router.get("/profile")
def get_profile(
    claims: TokenClaims = Depends(get_current_claims),
    users: UserService = Depends(get_user_service),
):
    user = users.get_user(claims.user_id)
    return ok("User profile retrieved successfully", UserOut.model_validate(user))


@router.put("/profile")
def update_profile(
    body: ProfileUpdateRequest,
    claims: TokenClaims = Depends(get_current_claims),
    users: UserService = Depends(get_user_service),
):
    user = users.update_profile(
        claims.user_id,
        username=body.username,
        password=body.password,
        new_password=body.new_password,
    )
    return ok("User profile updated successfully", UserOut.model_validate(user))


# --- cart --------------------------------------------------------------------

@router.get("/cart")
def view_cart(
    claims: TokenClaims = Depends(get_current_claims),
    carts: CartService = Depends(get_cart_service),
):
    items = carts.view(claims.user_id)
    total = sum(item.total_price for item in items)
    return ok("Cart items retrieved successfully", items, total=total)


@router.post("/cart/item/{product_id}")
def add_product_to_cart(
    product_id: int,
    quantity: int = Query(1, ge=1, le=MAX_QUANTITY),
    claims: TokenClaims = Depends(get_current_claims),
    carts: CartService = Depends(get_cart_service),
):
    item = carts.add_product(claims.user_id, product_id, quantity)
    return ok("Product added to cart successfully", item)


# Declared before /cart/{product_id} so "cancel" is not parsed as a product id
@router.delete("/cart/cancel")
def clear_cart(
    claims: TokenClaims = Depends(get_current_claims),
    carts: CartService = Depends(get_cart_service),
):
    carts.clear(claims.user_id)
    return ok("Cart cleared successfully")


@router.delete("/cart/{product_id}")
def remove_cart_item(
    product_id: int,
    claims: TokenClaims = Depends(get_current_claims),
    carts: CartService = Depends(get_cart_service),
):
    item = carts.decrement_item(claims.user_id, product_id)
    if item.removed:
        return ok("Product removed from cart successfully")
    return ok("Product quantity decreased successfully", item)


@router.post("/cart/checkout")
def checkout(
    body: CheckoutRequest | None = Body(default=None),
    claims: TokenClaims = Depends(get_current_claims),
    checkout_service: CheckoutService = Depends(get_checkout_service),
):
    body = body or CheckoutRequest()
    order = checkout_service.checkout(
        claims.user_id,
        shipping_address=body.shipping_address,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    return ok("Checkout successful", OrderOut.model_validate(order))


# --- orders ------------------------------------------------------------------

@router.get("/orders")
def view_orders(
    claims: TokenClaims = Depends(get_current_claims),
    orders: OrderService = Depends(get_order_service),
):
    data = [OrderOut.model_validate(o) for o in orders.orders_for_user(claims.user_id)]
    return ok("Orders retrieved successfully", data)


@router.delete("/order/cancel/{order_id}")
def cancel_order(
    order_id: int,
    claims: TokenClaims = Depends(get_current_claims),
    orders: OrderService = Depends(get_order_service),
):
    orders.cancel(order_id, claims.user_id)
    return ok("Order canceled successfully")
