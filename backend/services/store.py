# backend/services/store.py
import logging
import threading
from typing import Callable, Optional

from config import settings
from database import SessionLocal
from schemas.state import AppState
from services.events import EventBus, InvoiceRequested
from services.operations import OperationResult
from utils.pdf import save_invoice_document
from utils.persistence import StateRepository

logger = logging.getLogger(__name__)


class StateStore:
    """Container for the current ledger snapshot.

    ``apply`` runs an operation against the current snapshot and, when the
    operation was applied, replaces the snapshot wholesale, persists it and
    then publishes the operation's events. Persistence and events come after
    the replacement and are not part of the operation itself.
    """

    def __init__(self, state: Optional[AppState] = None, repository=None, bus: Optional[EventBus] = None):
        self._repository = repository
        self.bus = bus or EventBus()
        self._lock = threading.Lock()
        if state is None:
            state = repository.load() if repository is not None else AppState.empty()
        self._state = state

    @property
    def state(self) -> AppState:
        return self._state

    def apply(self, operation: Callable[..., OperationResult], *args, **kwargs) -> OperationResult:
        with self._lock:
            result = operation(self._state, *args, **kwargs)
            if not result.applied:
                return result
            self._state = result.state
            if self._repository is not None:
                try:
                    self._repository.save(result.state)
                except Exception:
                    logger.exception("Failed to persist state after %s", operation.__name__)
                    raise

        for event in result.events:
            self.bus.publish(event)
        return result


_store: Optional[StateStore] = None


def build_store() -> StateStore:
    repository = StateRepository(
        SessionLocal,
        settings.STATE_KEY,
        default=AppState.empty(settings.COMPANY_NAME, settings.FIRST_BILL_NO),
    )
    store = StateStore(repository=repository)
    store.bus.subscribe(InvoiceRequested, save_invoice_document)
    return store


# FastAPI dependency returning the process-wide store
def get_store() -> StateStore:
    global _store
    if _store is None:
        _store = build_store()
    return _store
