# tests/test_ledger.py
import pytest

from conftest import NOW
from schemas.transaction import Transaction
from services import ledger, operations


def test_weighted_average_cost_blends_existing_and_incoming():
    assert ledger.weighted_average_cost(10, 5, 10, 7) == pytest.approx(6)


def test_weighted_average_cost_from_empty_stock_uses_incoming_rate():
    assert ledger.weighted_average_cost(0, 0, 5, 3) == pytest.approx(3)


def test_weighted_average_cost_without_positive_quantity_falls_back():
    assert ledger.weighted_average_cost(-5, 2, 5, 9) == 9


def test_format_bill_number():
    assert ledger.format_bill_number(1001) == "INV-1001"


def _dispatch_and_sell(seeded):
    state, product, client = seeded
    state = operations.dispatch_to_client(state, client.id, product.id, 5, 400, now=NOW + 1).state
    state = operations.report_client_sale(state, client.id, product.id, 2, 450, now=NOW + 2).state
    return state, product, client


def test_client_stock_balance_is_dispatched_minus_sold(seeded):
    state, product, client = _dispatch_and_sell(seeded)
    assert ledger.client_stock_balance(state, client.id, product.id) == 3
    assert ledger.client_stock_balance(state, "someone-else", product.id) == 0


def test_client_performance(seeded):
    state, product, client = _dispatch_and_sell(seeded)
    perf = ledger.client_performance(state, client.id)

    assert perf.client.id == client.id
    assert perf.total_revenue == pytest.approx(900)
    assert perf.total_units_provided == 5
    assert perf.total_units_sold == 2
    assert perf.sales_efficiency == pytest.approx(40)
    assert len(perf.stock_summary) == 1
    summary = perf.stock_summary[0]
    assert (summary.provided, summary.sold, summary.in_hand) == (5, 2, 3)
    assert [t.type for t in perf.recent_activity] == ["client_sale", "dispatch"]


def test_client_performance_without_dispatches(seeded):
    state, _, client = seeded
    perf = ledger.client_performance(state, client.id)
    assert perf.sales_efficiency == 0
    assert perf.stock_summary == []


def test_client_performance_unknown_client(seeded):
    state, _, _ = seeded
    assert ledger.client_performance(state, "missing") is None


def test_all_client_performance_covers_every_client(seeded):
    state, _, _ = seeded
    state = operations.register_client(state, "Second Client", now=NOW).state
    rows = ledger.all_client_performance(state)
    assert [r.client.name for r in rows] == ["Ravi Traders", "Second Client"]


def test_dashboard_totals(seeded):
    state, _, _ = _dispatch_and_sell(seeded)
    totals = ledger.dashboard_totals(state)

    assert totals.gross_sales == pytest.approx(2000)
    assert totals.net_profit == pytest.approx(500)
    assert totals.market_reach == pytest.approx(900)
    assert totals.asset_spend == pytest.approx(6000)


def test_low_stock_products_sorted_by_stock(empty_state):
    state = empty_state
    for name, stock in [("Sand", 8), ("Bricks", 50), ("Lime", 2)]:
        state = operations.register_product(state, name, "kg", stock=stock, purchase_rate=1, now=NOW).state

    names = [p.name for p in ledger.low_stock_products(state, 10)]
    assert names == ["Lime", "Sand"]


def test_recent_dispatches_newest_first_and_limited(seeded):
    state, product, client = seeded
    for i in range(8):
        state = operations.dispatch_to_client(state, client.id, product.id, 1, 400, now=NOW + i).state

    recent = ledger.recent_dispatches(state)
    assert len(recent) == ledger.RECENT_DISPATCH_LIMIT
    assert recent[0].bill_number == "INV-1008"


def test_invoice_document_snapshot(seeded):
    state, product, client = seeded
    result = operations.dispatch_to_client(state, client.id, product.id, 5, 400, now=NOW)
    doc = ledger.invoice_document(result.state, result.entity)

    assert doc.bill_number == "INV-1001"
    assert doc.company_name == "NexGen Solutions"
    assert doc.client.name == "Ravi Traders"
    assert doc.product.unit == "bags"
    assert doc.product.total == pytest.approx(2000)
    assert ledger.find_dispatch_by_bill(result.state, "INV-1001").id == result.entity.id
    assert ledger.find_dispatch_by_bill(result.state, "INV-9999") is None


def test_client_stock_balance_reports_inconsistent_data_as_negative(seeded):
    state, product, client = seeded
    orphan_sale = Transaction(
        id="sale-without-dispatch",
        client_id=client.id,
        product_id=product.id,
        product_name=product.name,
        type="client_sale",
        quantity=4,
        rate=450,
        total=1800,
        timestamp=NOW,
    )
    state = state.model_copy(update={"transactions": (orphan_sale,) + state.transactions})

    assert ledger.client_stock_balance(state, client.id, product.id) == -4
