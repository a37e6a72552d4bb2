# schemas/reports.py
from typing import List

from schemas.base import EntityBase
from schemas.client import Client
from schemas.product import Product, Unit
from schemas.transaction import Transaction


# Headline figures for the dashboard
class DashboardTotals(EntityBase):
    # Σ dispatch totals
    gross_sales: float = 0
    # Σ dispatch profits
    net_profit: float = 0
    # Σ client sale totals
    market_reach: float = 0
    # Σ purchase totals
    asset_spend: float = 0


# Per-product view of the stock a client holds
class StockSummaryItem(EntityBase):
    product_id: str
    name: str
    unit: Unit
    provided: float
    sold: float
    in_hand: float


class ClientPerformance(EntityBase):
    client: Client
    # Only client sales count as revenue
    total_revenue: float = 0
    total_units_sold: float = 0
    total_units_provided: float = 0
    sales_efficiency: float = 0
    stock_summary: List[StockSummaryItem] = []
    recent_activity: List[Transaction] = []


class ClientBalance(EntityBase):
    client_id: str
    product_id: str
    balance: float


# Schemas for low stock alerting
class LowStockPage(EntityBase):
    items: List[Product]
    threshold: float
    total: int


class DashboardResponse(EntityBase):
    totals: DashboardTotals
    recent_dispatches: List[Transaction]
    low_stock: List[Product]
