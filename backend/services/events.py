# backend/services/events.py
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, List

from schemas.invoice import InvoiceDocument

logger = logging.getLogger(__name__)


# Published after a dispatch has been committed
@dataclass(frozen=True)
class InvoiceRequested:
    transaction_id: str
    document: InvoiceDocument


class EventBus:
    """Synchronous fan-out of committed ledger events.

    Listeners run after the state has been replaced. A failing listener is
    logged and skipped; it never affects the committed state or the other
    listeners.
    """

    def __init__(self):
        self._listeners: DefaultDict[type, List[Callable]] = defaultdict(list)

    def subscribe(self, event_type: type, listener: Callable) -> None:
        self._listeners[event_type].append(listener)

    def publish(self, event) -> None:
        for listener in list(self._listeners[type(event)]):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed for %s", listener, type(event).__name__)
