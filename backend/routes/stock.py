# backend/routes/stock.py
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional

from database import get_db
from routes.common import commit, paginate
from services import operations
from services.store import StateStore, get_store
import schemas.stock as stock_schemas

router = APIRouter(tags=["Stock"])


# Inventory audit trail, newest first
@router.get("/logs", response_model=stock_schemas.InventoryLogPage)
def list_inventory_logs(
    product_id: Optional[str] = Query(None),
    type: Optional[stock_schemas.InventoryLogType] = Query(None),
    q: Optional[str] = Query(None, description="Search by product name or reason"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=500),
    store: StateStore = Depends(get_store),
):
    items = list(store.state.inventory_logs)
    if product_id:
        items = [log for log in items if log.product_id == product_id]
    if type:
        items = [log for log in items if log.type == type]
    if q:
        needle = q.strip().lower()
        items = [log for log in items if needle in log.product_name.lower() or needle in log.reason.lower()]
    return paginate(items, page, page_size)


@router.post("/adjust", response_model=stock_schemas.InventoryLog)
def adjust_stock(
    payload: stock_schemas.StockAdjustCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="STOCK_ADJUSTMENT", resource="stock", not_found="Product not found",
        operation=operations.adjust_stock,
        product_id=payload.product_id, change=payload.change, reason=payload.reason,
    )
    return result.entity
