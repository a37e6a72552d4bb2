# backend/schemas/stock.py
from pydantic import BaseModel, Field
from typing import List, Literal

from schemas.base import EntityBase

# Define allowed types for inventory log entries
InventoryLogType = Literal["manual", "dispatch", "purchase"]


# Audit entry recording why the warehouse stock of a product changed
class InventoryLog(EntityBase):
    id: str
    product_id: str
    product_name: str
    type: InventoryLogType
    # Signed stock delta
    change: float
    reason: str = ""
    timestamp: int


# Schema for a manual stock adjustment
class StockAdjustCreate(BaseModel):
    product_id: str
    change: float
    reason: str = Field(min_length=1)


# Paginated inventory log history
class InventoryLogPage(BaseModel):
    items: List[InventoryLog]
    total: int
    page: int
    page_size: int
