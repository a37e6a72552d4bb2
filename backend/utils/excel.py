# backend/utils/excel.py
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from config import settings
from schemas.state import AppState
from services.errors import ExportUnavailable, NothingToExport

EXPORT_DIR = Path(settings.EXPORT_DIR)
SHEET_NAME = "Invoices"

COLUMNS = [
    "Invoice ID",
    "Date",
    "Client Name",
    "Client Phone",
    "Product",
    "Quantity",
    "Unit",
    "Rate (INR)",
    "Total Amount (INR)",
    "Profit (INR)",
]


def export_filename(today: date) -> str:
    return f"Invoices_Export_{today.isoformat()}.xlsx"


def build_invoice_rows(state: AppState) -> List[Dict]:
    """One row per dispatch (issued invoice), in ledger order."""
    clients = {c.id: c for c in state.clients}
    products = {p.id: p for p in state.inventory}

    rows = []
    for t in state.transactions:
        if t.type != "dispatch":
            continue
        client = clients.get(t.client_id)
        product = products.get(t.product_id)
        rows.append({
            "Invoice ID": t.bill_number or "N/A",
            "Date": datetime.fromtimestamp(t.timestamp / 1000).strftime("%d/%m/%Y"),
            "Client Name": client.name if client else "Unknown Client",
            "Client Phone": client.phone if client else "",
            "Product": t.product_name,
            "Quantity": t.quantity,
            "Unit": product.unit if product else "",
            "Rate (INR)": t.rate or 0,
            "Total Amount (INR)": t.total or 0,
            "Profit (INR)": t.profit or 0,
        })
    return rows


def invoices_dataframe(state: AppState) -> pd.DataFrame:
    return pd.DataFrame(build_invoice_rows(state), columns=COLUMNS)


def export_invoices_to_excel(state: AppState, out_dir: Optional[Path] = None, today: Optional[date] = None) -> Path:
    """Write the invoice register to ``Invoices_Export_<date>.xlsx`` and return its path."""
    df = invoices_dataframe(state)
    if df.empty:
        raise NothingToExport("No invoice data available to export.")

    try:
        import openpyxl  # noqa: F401
    except ImportError:
        raise ExportUnavailable("openpyxl is not installed. Run: python -m pip install openpyxl")

    out_dir = out_dir or EXPORT_DIR
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / export_filename(today or date.today())
    df.to_excel(out_path, sheet_name=SHEET_NAME, index=False, engine="openpyxl")
    return out_path
