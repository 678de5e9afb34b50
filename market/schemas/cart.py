# market/schemas/cart.py
# Cart line as shown to the client.
from pydantic import BaseModel


class CartItemView(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    total_price: float

    @property
    def removed(self) -> bool:
        """quantity == 0 means the line was deleted."""
        return self.quantity == 0
