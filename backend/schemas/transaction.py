# backend/schemas/transaction.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from schemas.base import EntityBase

TransactionType = Literal["purchase", "dispatch", "client_sale"]


# Ledger entry. product_name is a snapshot taken when the entry is written
# and is not updated when the product is renamed later.
class Transaction(EntityBase):
    id: str
    product_id: str
    product_name: str
    type: TransactionType
    quantity: float
    rate: Optional[float] = None
    # quantity * rate
    total: Optional[float] = None
    # Dispatch only, fixed with the average cost at dispatch time
    profit: Optional[float] = None
    client_id: Optional[str] = None
    bill_number: Optional[str] = None
    timestamp: int


# Schema for dispatching stock to a client (issues a bill)
class DispatchCreate(BaseModel):
    client_id: str
    product_id: str
    quantity: float = Field(gt=0)
    rate: float = Field(ge=0)
    # Optional bill date in ms since epoch, defaults to now
    timestamp: Optional[int] = None


# Schema for a sale reported by a client out of the stock it holds
class ClientSaleCreate(BaseModel):
    client_id: str
    product_id: str
    quantity: float = Field(gt=0)
    rate: float = Field(ge=0)


# Schema for amending a transaction
class TransactionEditRequest(BaseModel):
    client_id: Optional[str] = None
    product_id: Optional[str] = None
    quantity: float = Field(gt=0)
    rate: float = Field(ge=0)


class TransactionListPage(BaseModel):
    items: List[Transaction]
    total: int
    page: int
    page_size: int
