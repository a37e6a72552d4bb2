# backend/routes/common.py
from typing import Callable, Optional

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from services.errors import ValidationRejected
from services.operations import OperationResult
from services.store import StateStore
from utils.audit import write_log


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def paginate(items: list, page: int, page_size: int) -> dict:
    start = (page - 1) * page_size
    return {"items": items[start:start + page_size], "total": len(items), "page": page, "page_size": page_size}


def commit(
    request: Request,
    db: Session,
    store: StateStore,
    *,
    action: str,
    resource: str,
    not_found: str,
    operation: Callable[..., OperationResult],
    **kwargs,
) -> OperationResult:
    """Apply an operation to the store and audit the outcome.

    Rejections map to 400, unknown references to 404.
    """
    try:
        result = store.apply(operation, **kwargs)
    except ValidationRejected as e:
        write_log(db, action=action, resource=resource, status="FAIL", ip=client_ip(request), meta={"detail": str(e)})
        raise HTTPException(status_code=400, detail=str(e))

    if not result.applied:
        write_log(db, action=action, resource=resource, status="FAIL", ip=client_ip(request), meta={"detail": not_found})
        raise HTTPException(status_code=404, detail=not_found)

    entity_id = getattr(result.entity, "id", None)
    write_log(db, action=action, resource=resource, status="SUCCESS", ip=client_ip(request), meta={"id": entity_id})
    return result
