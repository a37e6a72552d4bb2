# backend/services/ledger.py
"""Derived figures computed from a ledger snapshot.

Everything here is a pure query over an ``AppState``: no mutation, no I/O.
"""
import math
from datetime import datetime
from typing import List, Optional

from schemas.client import Client
from schemas.invoice import InvoiceDocument, InvoiceLine, InvoiceParty
from schemas.product import Product
from schemas.reports import ClientPerformance, DashboardTotals, StockSummaryItem
from schemas.state import AppState
from schemas.transaction import Transaction

LOW_STOCK_THRESHOLD = 10
RECENT_DISPATCH_LIMIT = 6
RECENT_ACTIVITY_LIMIT = 5


def format_bill_number(bill_no: int) -> str:
    return f"INV-{bill_no}"


def format_full_date(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%d %b %Y, %I:%M %p")


# ---- LOOKUPS ----
def find_product(state: AppState, product_id: str) -> Optional[Product]:
    return next((p for p in state.inventory if p.id == product_id), None)


def find_client(state: AppState, client_id: str) -> Optional[Client]:
    return next((c for c in state.clients if c.id == client_id), None)


def find_transaction(state: AppState, transaction_id: str) -> Optional[Transaction]:
    return next((t for t in state.transactions if t.id == transaction_id), None)


# ---- COSTING ----
def weighted_average_cost(existing_stock: float, existing_rate: float, incoming_qty: float, incoming_rate: float) -> float:
    """Moving-average unit cost after receiving ``incoming_qty`` at ``incoming_rate``.

    Falls back to ``incoming_rate`` when the combined quantity is not positive.
    """
    total_qty = existing_stock + incoming_qty
    if total_qty <= 0:
        return incoming_rate
    return math.fsum((existing_stock * existing_rate, incoming_qty * incoming_rate)) / total_qty


# ---- CLIENT STOCK ----
def client_stock_balance(state: AppState, client_id: str, product_id: str) -> float:
    """Units of a product a client still holds (dispatched minus reported sales).

    A negative value means the stored data is inconsistent; it is returned
    as-is for the caller to flag.
    """
    balance = 0.0
    for t in state.transactions:
        if t.client_id != client_id or t.product_id != product_id:
            continue
        if t.type == "dispatch":
            balance += t.quantity
        elif t.type == "client_sale":
            balance -= t.quantity
    return balance


def sales_efficiency(units_sold: float, units_provided: float) -> float:
    if units_provided <= 0:
        return 0.0
    return units_sold / units_provided * 100


def client_performance(state: AppState, client_id: str) -> Optional[ClientPerformance]:
    client = find_client(state, client_id)
    if client is None:
        return None

    client_transactions = [t for t in state.transactions if t.client_id == client.id]
    provided = [t for t in client_transactions if t.type == "dispatch"]
    sales = [t for t in client_transactions if t.type == "client_sale"]

    stock_summary: List[StockSummaryItem] = []
    for p in state.inventory:
        provided_qty = sum(t.quantity for t in provided if t.product_id == p.id)
        if provided_qty <= 0:
            continue
        sold_qty = sum(t.quantity for t in sales if t.product_id == p.id)
        stock_summary.append(StockSummaryItem(
            product_id=p.id,
            name=p.name,
            unit=p.unit,
            provided=provided_qty,
            sold=sold_qty,
            in_hand=provided_qty - sold_qty,
        ))

    total_units_sold = sum(t.quantity for t in sales)
    total_units_provided = sum(t.quantity for t in provided)
    recent_activity = sorted(client_transactions, key=lambda t: t.timestamp, reverse=True)[:RECENT_ACTIVITY_LIMIT]

    return ClientPerformance(
        client=client,
        total_revenue=sum(t.total or 0 for t in sales),
        total_units_sold=total_units_sold,
        total_units_provided=total_units_provided,
        sales_efficiency=sales_efficiency(total_units_sold, total_units_provided),
        stock_summary=stock_summary,
        recent_activity=recent_activity,
    )


def all_client_performance(state: AppState) -> List[ClientPerformance]:
    return [client_performance(state, c.id) for c in state.clients]


# ---- DASHBOARD ----
def dashboard_totals(state: AppState) -> DashboardTotals:
    def _sum(tx_type: str, field: str) -> float:
        return math.fsum(getattr(t, field) or 0 for t in state.transactions if t.type == tx_type)

    return DashboardTotals(
        gross_sales=_sum("dispatch", "total"),
        net_profit=_sum("dispatch", "profit"),
        market_reach=_sum("client_sale", "total"),
        asset_spend=_sum("purchase", "total"),
    )


def low_stock_products(state: AppState, threshold: float = LOW_STOCK_THRESHOLD) -> List[Product]:
    rows = [p for p in state.inventory if p.current_stock < threshold]
    return sorted(rows, key=lambda p: (p.current_stock, p.name))


def recent_dispatches(state: AppState, limit: int = RECENT_DISPATCH_LIMIT) -> List[Transaction]:
    return [t for t in state.transactions if t.type == "dispatch"][:limit]


# ---- INVOICES ----
def find_dispatch_by_bill(state: AppState, bill_number: str) -> Optional[Transaction]:
    return next((t for t in state.transactions if t.type == "dispatch" and t.bill_number == bill_number), None)


def invoice_document(state: AppState, transaction: Transaction) -> InvoiceDocument:
    """Snapshot of a dispatch as handed to the invoice generator."""
    client = find_client(state, transaction.client_id)
    product = find_product(state, transaction.product_id)
    rate = transaction.rate or 0
    return InvoiceDocument(
        company_name=state.settings.company_name,
        bill_number=transaction.bill_number or "",
        client=InvoiceParty(
            name=client.name if client else "Unknown Client",
            phone=client.phone if client else "",
            address=client.address if client else "",
        ),
        product=InvoiceLine(
            name=transaction.product_name,
            quantity=transaction.quantity,
            rate=rate,
            total=transaction.total if transaction.total is not None else transaction.quantity * rate,
            unit=product.unit if product else "",
        ),
        date=format_full_date(transaction.timestamp),
    )
