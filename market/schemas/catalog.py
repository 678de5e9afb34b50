# market/schemas/catalog.py
# Product and category bodies.
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from market.services.inventory import MAX_QUANTITY


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0, le=MAX_QUANTITY)
    category_id: int | None = None


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    category_id: int | None = None
    # Units added to stock through the inventory ledger
    restock: int | None = Field(default=None, gt=0, le=MAX_QUANTITY)


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    price: float
    stock: int
    category_id: int | None = None
    category: CategoryOut | None = None
    created_at: datetime | None = None
