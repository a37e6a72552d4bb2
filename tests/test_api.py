# tests/test_api.py
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app
from services.store import get_store
from utils.pdf import STORAGE_DIR


@pytest.fixture
def client(session_factory, store):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def stocked(client):
    product = client.post("/products", json={
        "name": "Cement", "unit": "bags", "stock": 20, "purchase_rate": 300, "sale_rate": 360,
    }).json()
    partner = client.post("/clients", json={"name": "Ravi Traders", "phone": "9876543210"}).json()
    return product, partner


def test_root(client):
    assert client.get("/").status_code == 200


def test_product_lifecycle(client, stocked):
    product, _ = stocked
    assert product["currentStock"] == 20
    assert product["avgPurchaseRate"] == 300

    r = client.post(f"/products/{product['id']}/purchase", json={"quantity": 20, "rate": 400})
    assert r.status_code == 200
    assert r.json()["type"] == "purchase"

    r = client.get(f"/products/{product['id']}")
    assert r.json()["avgPurchaseRate"] == pytest.approx(350)

    r = client.patch(f"/products/{product['id']}", json={
        "name": "Cement OPC", "unit": "bags", "stock": 35, "purchase_rate": 350, "sale_rate": 420,
    })
    assert r.status_code == 200
    assert r.json()["name"] == "Cement OPC"

    page = client.get("/products", params={"q": "opc"}).json()
    assert page["total"] == 1


def test_purchase_new_product_applies_markup(client):
    r = client.post("/products/purchase-new", json={"name": "Steel Rod", "unit": "units", "quantity": 10, "rate": 100})
    assert r.status_code == 200
    product = client.get(f"/products/{r.json()['productId']}").json()
    assert product["saleRate"] == pytest.approx(120)


def test_unknown_references_return_404(client):
    assert client.get("/products/missing").status_code == 404
    assert client.post("/products/missing/purchase", json={"quantity": 1, "rate": 1}).status_code == 404
    assert client.get("/clients/missing").status_code == 404
    assert client.patch("/transactions/missing", json={"quantity": 1, "rate": 1}).status_code == 404
    assert client.get("/invoices/INV-9999/download").status_code == 404


def test_dispatch_sale_and_reports(client, stocked):
    product, partner = stocked

    r = client.post("/transactions/dispatch", json={
        "client_id": partner["id"], "product_id": product["id"], "quantity": 5, "rate": 400,
    })
    assert r.status_code == 200
    dispatch = r.json()
    assert dispatch["billNumber"] == "INV-1001"
    assert dispatch["profit"] == pytest.approx(500)

    r = client.post("/transactions/client-sale", json={
        "client_id": partner["id"], "product_id": product["id"], "quantity": 6, "rate": 450,
    })
    assert r.status_code == 400

    r = client.post("/transactions/client-sale", json={
        "client_id": partner["id"], "product_id": product["id"], "quantity": 2, "rate": 450,
    })
    assert r.status_code == 200

    balance = client.get(f"/clients/{partner['id']}/balance/{product['id']}").json()
    assert balance["balance"] == 3

    perf = client.get(f"/clients/{partner['id']}/performance").json()
    assert perf["salesEfficiency"] == pytest.approx(40)

    dashboard = client.get("/reports/dashboard").json()
    assert dashboard["totals"]["grossSales"] == pytest.approx(2000)
    assert dashboard["totals"]["netProfit"] == pytest.approx(500)
    assert dashboard["totals"]["marketReach"] == pytest.approx(900)
    assert dashboard["totals"]["assetSpend"] == pytest.approx(6000)
    assert [t["billNumber"] for t in dashboard["recentDispatches"]] == ["INV-1001"]

    transactions = client.get("/transactions", params={"type": "dispatch"}).json()
    assert transactions["total"] == 1

    r = client.patch(f"/transactions/{dispatch['id']}", json={"quantity": 8, "rate": 400})
    assert r.status_code == 200
    assert r.json()["billNumber"] == "INV-1001"
    assert client.get(f"/products/{product['id']}").json()["currentStock"] == 12


def test_dispatch_rejections(client, stocked):
    product, partner = stocked
    r = client.post("/transactions/dispatch", json={
        "client_id": partner["id"], "product_id": product["id"], "quantity": 50, "rate": 400,
    })
    assert r.status_code == 400
    r = client.post("/transactions/dispatch", json={
        "client_id": "missing", "product_id": product["id"], "quantity": 1, "rate": 400,
    })
    assert r.status_code == 400


def test_invoice_download_and_export(client, stocked):
    product, partner = stocked
    assert client.get("/invoices/export").status_code == 404

    client.post("/transactions/dispatch", json={
        "client_id": partner["id"], "product_id": product["id"], "quantity": 5, "rate": 400,
    })

    r = client.get("/invoices/INV-1001/download")
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert r.content.startswith(b"%PDF")

    r = client.get("/invoices/export")
    assert r.status_code == 200
    assert "Invoices_Export_" in r.headers["content-disposition"]

    assert client.get("/invoices").json()["total"] == 1


def test_stock_adjustment_and_logs(client, stocked):
    product, _ = stocked
    r = client.post("/stock/adjust", json={"product_id": product["id"], "change": -4, "reason": "Damaged"})
    assert r.status_code == 200
    assert r.json()["change"] == -4

    assert client.post("/stock/adjust", json={"product_id": product["id"], "change": 0, "reason": "x"}).status_code == 400
    assert client.post("/stock/adjust", json={"product_id": "missing", "change": 1, "reason": "x"}).status_code == 404

    logs = client.get("/stock/logs", params={"product_id": product["id"]}).json()
    assert [log["type"] for log in logs["items"]] == ["manual", "purchase"]
    assert client.get(f"/products/{product['id']}").json()["currentStock"] == 16


def test_low_stock_report(client, stocked):
    r = client.get("/reports/low-stock", params={"threshold": 25}).json()
    assert r["threshold"] == 25
    assert [p["name"] for p in r["items"]] == ["Cement"]
    assert client.get("/reports/low-stock").json()["total"] == 0


def test_company_settings(client):
    company = client.get("/company").json()
    assert company["next_bill_number"] == "INV-1001"

    r = client.patch("/company", json={"company_name": "Acme Supplies"})
    assert r.status_code == 200
    assert r.json()["company_name"] == "Acme Supplies"


def test_audit_log_records_outcomes(client, stocked):
    client.post("/stock/adjust", json={"product_id": "missing", "change": 1, "reason": "x"})

    logs = client.get("/logs").json()
    actions = {(item["action"], item["status"]) for item in logs["items"]}
    assert ("PRODUCT_CREATE", "SUCCESS") in actions
    assert ("CLIENT_CREATE", "SUCCESS") in actions
    assert ("STOCK_ADJUSTMENT", "FAIL") in actions

    failed = client.get("/logs", params={"status": "FAIL"}).json()
    assert failed["total"] == 1


def test_invoice_download_reflects_edited_dispatch(client, stocked):
    product, partner = stocked
    dispatch = client.post("/transactions/dispatch", json={
        "client_id": partner["id"], "product_id": product["id"], "quantity": 5, "rate": 400,
    }).json()
    assert client.patch(f"/transactions/{dispatch['id']}", json={"quantity": 8, "rate": 410}).status_code == 200

    cached = STORAGE_DIR / "INV-1001_Ravi_Traders.pdf"
    cached.write_bytes(b"stale invoice")

    r = client.get("/invoices/INV-1001/download")
    assert r.status_code == 200
    assert r.content.startswith(b"%PDF")
    assert cached.read_bytes().startswith(b"%PDF")
