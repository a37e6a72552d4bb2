# backend/routes/invoice.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from database import get_db
from routes.common import client_ip, paginate
from services import ledger
from services.errors import ExportUnavailable, NothingToExport
from services.store import StateStore, get_store
from schemas.transaction import TransactionListPage
from utils.audit import write_log
from utils.excel import export_invoices_to_excel
from utils.pdf import generate_invoice_pdf, get_pdf_path

router = APIRouter(prefix="/invoices", tags=["Invoices"])


# Issued bills (dispatch transactions), newest first
@router.get("", response_model=TransactionListPage)
def list_invoices(
    client_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=500),
    store: StateStore = Depends(get_store),
):
    items = [t for t in store.state.transactions if t.type == "dispatch"]
    if client_id:
        items = [t for t in items if t.client_id == client_id]
    return paginate(items, page, page_size)


@router.get("/export")
def export_invoices(
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    # Spreadsheet of all issued invoices
    try:
        path = export_invoices_to_excel(store.state)
    except NothingToExport as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ExportUnavailable as e:
        write_log(db, action="INVOICE_EXPORT", resource="invoices", status="FAIL", ip=client_ip(request), meta={"detail": str(e)})
        raise HTTPException(status_code=503, detail=str(e))

    write_log(db, action="INVOICE_EXPORT", resource="invoices", status="SUCCESS", ip=client_ip(request), meta={"file": path.name})
    return FileResponse(
        path=str(path),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=path.name,
    )


@router.get("/{bill_number}/download")
def download_invoice_pdf(
    bill_number: str,
    request: Request,
    db: Session = Depends(get_db),
    store: StateStore = Depends(get_store),
):
    # Rendered from the current ledger on every download
    transaction = ledger.find_dispatch_by_bill(store.state, bill_number)
    if not transaction:
        raise HTTPException(status_code=404, detail="Invoice not found")

    document = ledger.invoice_document(store.state, transaction)
    pdf_path = get_pdf_path(document)
    try:
        generate_invoice_pdf(document, pdf_path)
    except ExportUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    write_log(db, action="INVOICE_PDF_DOWNLOAD", resource="invoices", status="SUCCESS", ip=client_ip(request), meta={"bill_number": bill_number})

    return FileResponse(
        path=str(pdf_path),
        media_type="application/pdf",
        filename=pdf_path.name,
    )
