# backend/schemas/product.py
from pydantic import BaseModel, Field
from typing import List, Literal

from schemas.base import EntityBase

# Allowed stock units
Unit = Literal["kg", "bags", "units", "liters"]
UNITS = ("kg", "bags", "units", "liters")


# A stocked item held at the warehouse
class Product(EntityBase):
    id: str
    name: str
    unit: Unit
    current_stock: float = 0
    # Weighted-average unit cost, recomputed on every purchase
    avg_purchase_rate: float = 0
    # Default sale price; every transaction records its own rate
    sale_rate: float = 0
    created_at: int
    last_updated: int


# Schema for registering a new product
class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    unit: Unit
    stock: float = Field(default=0, ge=0)
    purchase_rate: float = Field(default=0, ge=0)
    sale_rate: float = Field(default=0, ge=0)


# Schema for full product edits - every field is overwritten
class ProductEditRequest(BaseModel):
    name: str = Field(min_length=1)
    unit: Unit
    stock: float = Field(ge=0)
    purchase_rate: float = Field(ge=0)
    sale_rate: float = Field(ge=0)


# Schema for restocking an existing product
class PurchaseCreate(BaseModel):
    quantity: float = Field(gt=0)
    rate: float = Field(ge=0)


# Schema for buying a product that is not in the catalogue yet
class NewProductPurchaseCreate(BaseModel):
    name: str = Field(min_length=1)
    unit: Unit
    quantity: float = Field(gt=0)
    rate: float = Field(ge=0)


class ProductListPage(BaseModel):
    items: List[Product]
    total: int
    page: int
    page_size: int
