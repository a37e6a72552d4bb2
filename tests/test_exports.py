# tests/test_exports.py
from datetime import date

import pandas as pd
import pytest

from conftest import NOW
from services import ledger, operations
from services.errors import NothingToExport
from utils.excel import COLUMNS, build_invoice_rows, export_filename, export_invoices_to_excel
from utils.pdf import generate_invoice_pdf, get_pdf_path, invoice_filename


@pytest.fixture
def dispatched(seeded):
    state, product, client = seeded
    result = operations.dispatch_to_client(state, client.id, product.id, 5, 400, now=NOW)
    return result.state, result.entity


def test_invoice_filename_replaces_whitespace():
    assert invoice_filename("INV-1001", "Ravi  Big\tTraders") == "INV-1001_Ravi_Big_Traders.pdf"


def test_generate_invoice_pdf(dispatched, tmp_path):
    state, dispatch = dispatched
    document = ledger.invoice_document(state, dispatch)

    path = generate_invoice_pdf(document, get_pdf_path(document, tmp_path))

    assert path == tmp_path / "INV-1001_Ravi_Traders.pdf"
    assert path.read_bytes().startswith(b"%PDF")


def test_build_invoice_rows(dispatched):
    state, _ = dispatched
    [row] = build_invoice_rows(state)

    assert row["Invoice ID"] == "INV-1001"
    assert row["Client Name"] == "Ravi Traders"
    assert row["Client Phone"] == "9876543210"
    assert row["Product"] == "Cement"
    assert row["Unit"] == "bags"
    assert row["Total Amount (INR)"] == 2000
    assert row["Profit (INR)"] == 500


def test_build_invoice_rows_with_missing_client(dispatched):
    state, _ = dispatched
    state = state.model_copy(update={"clients": ()})
    [row] = build_invoice_rows(state)
    assert row["Client Name"] == "Unknown Client"
    assert row["Client Phone"] == ""


def test_export_without_invoices(seeded, tmp_path):
    state, _, _ = seeded
    with pytest.raises(NothingToExport):
        export_invoices_to_excel(state, out_dir=tmp_path)


def test_export_invoices_to_excel(dispatched, tmp_path):
    state, _ = dispatched
    path = export_invoices_to_excel(state, out_dir=tmp_path, today=date(2026, 1, 5))

    assert path.name == export_filename(date(2026, 1, 5)) == "Invoices_Export_2026-01-05.xlsx"
    df = pd.read_excel(path, sheet_name="Invoices")
    assert list(df.columns) == COLUMNS
    assert df.loc[0, "Invoice ID"] == "INV-1001"
    assert df.loc[0, "Quantity"] == 5


def test_invoice_path_stays_inside_storage(seeded, tmp_path):
    state, product, _ = seeded
    state = operations.register_client(state, "x/../../escaped", now=NOW).state
    client = state.clients[-1]
    result = operations.dispatch_to_client(state, client.id, product.id, 1, 400, now=NOW)
    document = ledger.invoice_document(result.state, result.entity)
    storage = tmp_path / "invoices"

    path = generate_invoice_pdf(document, get_pdf_path(document, storage))

    assert path.name == "INV-1001_x_.._.._escaped.pdf"
    assert path.resolve().parent == storage.resolve()
    assert list(tmp_path.glob("*.pdf")) == []
