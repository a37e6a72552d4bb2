# backend/routes/products.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from routes.common import commit, paginate
from services import ledger, operations
from services.store import StateStore, get_store
import schemas.product as product_schemas
from schemas.transaction import Transaction

router = APIRouter(tags=["Products"])


# =========================
# PRODUCT LIST
# =========================
@router.get("/products", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None, description="Search by name"),
    unit: Optional[product_schemas.Unit] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=1000),
    store: StateStore = Depends(get_store),
):
    items = list(store.state.inventory)
    if q:
        needle = q.strip().lower()
        items = [p for p in items if needle in p.name.lower()]
    if unit:
        items = [p for p in items if p.unit == unit]
    return paginate(items, page, page_size)


@router.get("/products/{product_id}", response_model=product_schemas.Product)
def get_product(product_id: str, store: StateStore = Depends(get_store)):
    product = ledger.find_product(store.state, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# =========================
# REGISTER / EDIT
# =========================
@router.post("/products", response_model=product_schemas.Product)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="PRODUCT_CREATE", resource="products", not_found="Product not found",
        operation=operations.register_product,
        name=payload.name, unit=payload.unit, stock=payload.stock,
        purchase_rate=payload.purchase_rate, sale_rate=payload.sale_rate,
    )
    return result.entity


@router.patch("/products/{product_id}", response_model=product_schemas.Product)
def update_product(
    product_id: str,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="PRODUCT_UPDATE", resource="products", not_found="Product not found",
        operation=operations.edit_product,
        product_id=product_id, name=payload.name, unit=payload.unit, stock=payload.stock,
        purchase_rate=payload.purchase_rate, sale_rate=payload.sale_rate,
    )
    return result.entity


# =========================
# PURCHASES
# =========================
@router.post("/products/purchase-new", response_model=Transaction)
def purchase_new_product(
    payload: product_schemas.NewProductPurchaseCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="PURCHASE_NEW_PRODUCT", resource="products", not_found="Product not found",
        operation=operations.record_new_product_purchase,
        name=payload.name, unit=payload.unit, quantity=payload.quantity, rate=payload.rate,
        markup=settings.DEFAULT_MARKUP,
    )
    return result.entity


@router.post("/products/{product_id}/purchase", response_model=Transaction)
def purchase_product(
    product_id: str,
    payload: product_schemas.PurchaseCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="PURCHASE", resource="products", not_found="Product not found",
        operation=operations.record_purchase,
        product_id=product_id, quantity=payload.quantity, rate=payload.rate,
    )
    return result.entity
