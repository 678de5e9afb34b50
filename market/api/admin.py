# market/api/admin.py
# Admin-only routes: catalog maintenance, users and order status.
from fastapi import APIRouter, Depends, status

from market.api.deps import get_catalog_service, get_order_service, get_user_service
from market.core.errors import ValidationError
from market.core.security import requires
from market.models.order import OrderStatus
from market.models.user import Role
from market.schemas.catalog import CategoryCreate, CategoryOut, CategoryUpdate, ProductCreate, ProductOut, ProductUpdate
from market.schemas.common import ok
from market.schemas.order import OrderOut
from market.schemas.user import UserOut
from market.services.catalog import CatalogService
from market.services.orders import OrderService
from market.services.users import UserService

router = APIRouter(prefix="/admin", dependencies=[Depends(requires(Role.admin))])

# Numeric codes and spellings still sent by older clients
LEGACY_STATUS_ALIASES = {
    "0": OrderStatus.pending,
    "1": OrderStatus.shipped,
    "2": OrderStatus.delivered,
    "3": OrderStatus.cancelled,
    "canceled": OrderStatus.cancelled,
}


def normalize_status(raw: str) -> OrderStatus:
    """Map a status from the URL to OrderStatus, accepting the legacy aliases."""
    value = raw.strip().lower()
    if value in LEGACY_STATUS_ALIASES:
        return LEGACY_STATUS_ALIASES[value]
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(f"invalid status: {raw}")


# --- products ----------------------------------------------------------------

@router.post("/product", status_code=status.HTTP_201_CREATED)
def create_product(body: ProductCreate, catalog: CatalogService = Depends(get_catalog_service)):
    product = catalog.create_product(body)
    return ok("Product created successfully", ProductOut.model_validate(product))


@router.put("/product/{product_id}")
def update_product(product_id: int, body: ProductUpdate, catalog: CatalogService = Depends(get_catalog_service)):
    product = catalog.update_product(product_id, body)
    return ok("Product updated successfully", ProductOut.model_validate(product))


@router.delete("/product/{product_id}")
def delete_product(product_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    catalog.delete_product(product_id)
    return ok("Product deleted successfully")


# --- categories --------------------------------------------------------------

@router.post("/category", status_code=status.HTTP_201_CREATED)
def create_category(body: CategoryCreate, catalog: CatalogService = Depends(get_catalog_service)):
    category = catalog.create_category(body)
    return ok("Category created successfully", CategoryOut.model_validate(category))


@router.put("/category/{category_id}")
def update_category(category_id: int, body: CategoryUpdate, catalog: CatalogService = Depends(get_catalog_service)):
    category = catalog.update_category(category_id, body)
    return ok("Category updated successfully", CategoryOut.model_validate(category))


@router.delete("/category/{category_id}")
def delete_category(category_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    catalog.delete_category(category_id)
    return ok("Category deleted successfully")


# --- users & orders ----------------------------------------------------------

@router.get("/users")
def all_users(users: UserService = Depends(get_user_service)):
    return ok("Users retrieved successfully", [UserOut.model_validate(u) for u in users.all_users()])


@router.get("/orders")
def all_orders(orders: OrderService = Depends(get_order_service)):
    return ok("All orders retrieved successfully", [OrderOut.model_validate(o) for o in orders.all_orders()])


@router.put("/order/status/{order_id}/{new_status}")
def update_order_status(order_id: int, new_status: str, orders: OrderService = Depends(get_order_service)):
    order, old_status = orders.transition(order_id, normalize_status(new_status))
    return ok(
        "Order status updated successfully",
        OrderOut.model_validate(order),
        old_status=old_status.value,
        new_status=order.status.value,
    )
