# backend/routes/transactions.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from routes.common import commit, paginate
from services import operations
from services.store import StateStore, get_store
import schemas.transaction as tx_schemas

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=tx_schemas.TransactionListPage)
def list_transactions(
    type: Optional[tx_schemas.TransactionType] = Query(None),
    client_id: Optional[str] = Query(None),
    product_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=500),
    store: StateStore = Depends(get_store),
):
    # Newest first, as stored
    items = list(store.state.transactions)
    if type:
        items = [t for t in items if t.type == type]
    if client_id:
        items = [t for t in items if t.client_id == client_id]
    if product_id:
        items = [t for t in items if t.product_id == product_id]
    return paginate(items, page, page_size)


# Dispatch stock to a client and issue the next bill.
# The invoice PDF is written after the dispatch is committed.
@router.post("/dispatch", response_model=tx_schemas.Transaction)
def dispatch_stock(
    payload: tx_schemas.DispatchCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="DISPATCH", resource="transactions", not_found="Client or product not found",
        operation=operations.dispatch_to_client,
        client_id=payload.client_id, product_id=payload.product_id,
        quantity=payload.quantity, rate=payload.rate, timestamp=payload.timestamp,
    )
    return result.entity


@router.post("/client-sale", response_model=tx_schemas.Transaction)
def report_client_sale(
    payload: tx_schemas.ClientSaleCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="CLIENT_SALE", resource="transactions", not_found="Client or product not found",
        operation=operations.report_client_sale,
        client_id=payload.client_id, product_id=payload.product_id,
        quantity=payload.quantity, rate=payload.rate,
    )
    return result.entity


@router.patch("/{transaction_id}", response_model=tx_schemas.Transaction)
def update_transaction(
    transaction_id: str,
    payload: tx_schemas.TransactionEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="TRANSACTION_UPDATE", resource="transactions", not_found="Transaction not found",
        operation=operations.edit_transaction,
        transaction_id=transaction_id, quantity=payload.quantity, rate=payload.rate,
        client_id=payload.client_id, product_id=payload.product_id,
    )
    return result.entity
