# backend/routes/company.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from routes.common import commit
from services import ledger, operations
from services.store import StateStore, get_store
from schemas.company import CompanyOut, CompanyUpdate

router = APIRouter(prefix="/company", tags=["Company"])

# Company name shown on invoices and the bill sequence


def _company_out(settings) -> CompanyOut:
    return CompanyOut(
        company_name=settings.company_name,
        next_bill_no=settings.next_bill_no,
        next_bill_number=ledger.format_bill_number(settings.next_bill_no),
    )


@router.get("", response_model=CompanyOut)
def get_company(store: StateStore = Depends(get_store)):
    return _company_out(store.state.settings)


@router.patch("", response_model=CompanyOut)
def update_company(
    payload: CompanyUpdate,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    result = commit(
        request, db, store,
        action="COMPANY_UPDATE", resource="company", not_found="Settings not found",
        operation=operations.update_settings,
        company_name=payload.company_name,
    )
    return _company_out(result.entity)
