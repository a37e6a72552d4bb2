# backend/schemas/state.py
from typing import Tuple

from schemas.base import EntityBase
from schemas.client import Client
from schemas.product import Product
from schemas.stock import InventoryLog
from schemas.transaction import Transaction

DEFAULT_COMPANY_NAME = "NexGen Solutions"
DEFAULT_FIRST_BILL_NO = 1001


class AppSettings(EntityBase):
    company_name: str = DEFAULT_COMPANY_NAME
    # Next bill sequence number, advanced once per dispatch
    next_bill_no: int = DEFAULT_FIRST_BILL_NO


class AppState(EntityBase):
    """Whole ledger snapshot.

    ``transactions`` and ``inventory_logs`` are kept newest first,
    ``inventory`` and ``clients`` in registration order.
    """

    inventory: Tuple[Product, ...] = ()
    inventory_logs: Tuple[InventoryLog, ...] = ()
    clients: Tuple[Client, ...] = ()
    transactions: Tuple[Transaction, ...] = ()
    settings: AppSettings = AppSettings()

    @classmethod
    def empty(cls, company_name: str = DEFAULT_COMPANY_NAME, first_bill_no: int = DEFAULT_FIRST_BILL_NO) -> "AppState":
        return cls(settings=AppSettings(company_name=company_name, next_bill_no=first_bill_no))
