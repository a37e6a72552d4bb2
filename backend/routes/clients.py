# backend/routes/clients.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from routes.common import commit
from services import ledger, operations
from services.store import StateStore, get_store
from schemas.client import Client, ClientCreate, ClientList, ClientUpdate
from schemas.reports import ClientBalance, ClientPerformance

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("", response_model=ClientList)
def list_clients(
    q: Optional[str] = Query(None, description="Search by name or phone"),
    store: StateStore = Depends(get_store),
):
    items = list(store.state.clients)
    if q:
        needle = q.strip().lower()
        items = [c for c in items if needle in c.name.lower() or needle in c.phone.lower()]
    return {"items": items, "total": len(items)}


@router.post("", response_model=Client)
def create_client(
    payload: ClientCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="CLIENT_CREATE", resource="clients", not_found="Client not found",
        operation=operations.register_client,
        name=payload.name, phone=payload.phone, address=payload.address,
    )
    return result.entity


@router.get("/{client_id}", response_model=Client)
def get_client(client_id: str, store: StateStore = Depends(get_store)):
    client = ledger.find_client(store.state, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.patch("/{client_id}", response_model=Client)
def update_client(
    client_id: str,
    payload: ClientUpdate,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="CLIENT_UPDATE", resource="clients", not_found="Client not found",
        operation=operations.edit_client,
        client_id=client_id, name=payload.name, phone=payload.phone, address=payload.address,
    )
    return result.entity


# Stock provided, sold and in hand for one client
@router.get("/{client_id}/performance", response_model=ClientPerformance)
def get_client_performance(client_id: str, store: StateStore = Depends(get_store)):
    performance = ledger.client_performance(store.state, client_id)
    if performance is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return performance


@router.get("/{client_id}/balance/{product_id}", response_model=ClientBalance)
def get_client_balance(client_id: str, product_id: str, store: StateStore = Depends(get_store)):
    state = store.state
    if not ledger.find_client(state, client_id):
        raise HTTPException(status_code=404, detail="Client not found")
    if not ledger.find_product(state, product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return ClientBalance(
        client_id=client_id,
        product_id=product_id,
        balance=ledger.client_stock_balance(state, client_id, product_id),
    )
