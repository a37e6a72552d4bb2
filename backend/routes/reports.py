# routes/reports.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from config import settings
from services import ledger
from services.store import StateStore, get_store
from schemas.reports import ClientPerformance, DashboardResponse, DashboardTotals, LowStockPage

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/dashboard", response_model=DashboardResponse)
def report_dashboard(store: StateStore = Depends(get_store)):
    state = store.state
    return DashboardResponse(
        totals=ledger.dashboard_totals(state),
        recent_dispatches=ledger.recent_dispatches(state),
        low_stock=ledger.low_stock_products(state, settings.LOW_STOCK_THRESHOLD),
    )


@router.get("/totals", response_model=DashboardTotals)
def report_totals(store: StateStore = Depends(get_store)):
    return ledger.dashboard_totals(store.state)


@router.get("/low-stock", response_model=LowStockPage)
def report_low_stock(
    threshold: Optional[float] = Query(None, ge=0, description="Stock threshold (<)"),
    store: StateStore = Depends(get_store),
):
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    items = ledger.low_stock_products(store.state, threshold)
    return LowStockPage(items=items, threshold=threshold, total=len(items))


@router.get("/client-performance", response_model=List[ClientPerformance])
def report_client_performance(store: StateStore = Depends(get_store)):
    return ledger.all_client_performance(store.state)
