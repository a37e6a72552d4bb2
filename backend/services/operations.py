# backend/services/operations.py
"""State transitions of the ledger.

Every operation takes the current ``AppState`` and returns an
``OperationResult`` holding the next snapshot. Validation failures raise
``ValidationRejected`` before anything is built, so an operation either
produces a complete new state or none at all. A reference to an unknown
product, client or transaction yields a ``NOT_FOUND`` result carrying the
unchanged input state.
"""
import enum
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from schemas.client import Client
from schemas.product import Product, UNITS
from schemas.state import AppState
from schemas.stock import InventoryLog
from schemas.transaction import Transaction
from services import ledger
from services.errors import ValidationRejected
from services.events import InvoiceRequested

logger = logging.getLogger(__name__)

DEFAULT_MARKUP = 1.2

# Stock effect of each transaction type on the warehouse
_STOCK_SIGN = {"purchase": 1, "dispatch": -1, "client_sale": 0}


class OperationStatus(str, enum.Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class OperationResult:
    status: OperationStatus
    state: AppState
    entity: Any = None
    # Events to publish once the new state is committed
    events: Tuple[Any, ...] = ()

    @property
    def applied(self) -> bool:
        return self.status == OperationStatus.APPLIED


def _applied(state: AppState, entity=None, events=()) -> OperationResult:
    return OperationResult(OperationStatus.APPLIED, state, entity, tuple(events))


def _not_found(state: AppState) -> OperationResult:
    return OperationResult(OperationStatus.NOT_FOUND, state)


# ---- HELPERS ----
def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())


def _fmt(value: float) -> str:
    """Render 10.0 as "10" and 10.5 as "10.5" in log reasons."""
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def _require_text(value: Optional[str], label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationRejected(f"{label} is required")
    return text


def _require_unit(unit: Optional[str]) -> str:
    if unit not in UNITS:
        raise ValidationRejected(f"Unit must be one of: {', '.join(UNITS)}")
    return unit


def _require_positive(value: float, label: str = "Quantity") -> None:
    if value is None or value <= 0:
        raise ValidationRejected(f"{label} must be greater than zero")


def _require_non_negative(value: float, label: str) -> None:
    if value is None or value < 0:
        raise ValidationRejected(f"{label} cannot be negative")


def _replace(items: tuple, updated) -> tuple:
    return tuple(updated if item.id == updated.id else item for item in items)


def _log_entry(product: Product, log_type: str, change: float, reason: str, now: int) -> InventoryLog:
    return InventoryLog(
        id=_new_id(),
        product_id=product.id,
        product_name=product.name,
        type=log_type,
        change=change,
        reason=reason,
        timestamp=now,
    )


# =========================
# PRODUCTS
# =========================
def register_product(
    state: AppState,
    name: str,
    unit: str,
    stock: float = 0,
    purchase_rate: float = 0,
    sale_rate: float = 0,
    now: Optional[int] = None,
) -> OperationResult:
    """Create a product, recording opening stock as a purchase when there is any."""
    name = _require_text(name, "Product name")
    unit = _require_unit(unit)
    _require_non_negative(stock, "Initial stock")
    _require_non_negative(purchase_rate, "Purchase rate")
    _require_non_negative(sale_rate, "Sale rate")
    now = now if now is not None else _now_ms()

    product = Product(
        id=_new_id(),
        name=name,
        unit=unit,
        current_stock=stock,
        avg_purchase_rate=purchase_rate,
        sale_rate=sale_rate,
        created_at=now,
        last_updated=now,
    )

    transactions = state.transactions
    if stock > 0:
        opening = Transaction(
            id=_new_id(),
            product_id=product.id,
            product_name=product.name,
            type="purchase",
            quantity=stock,
            rate=purchase_rate,
            total=stock * purchase_rate,
            timestamp=now,
        )
        transactions = (opening,) + transactions
        log = _log_entry(product, "purchase", stock, f"Initial stock acquisition @ ₹{_fmt(purchase_rate)}", now)
    else:
        log = _log_entry(product, "manual", 0, "New product registration", now)

    new_state = state.model_copy(update={
        "inventory": state.inventory + (product,),
        "transactions": transactions,
        "inventory_logs": (log,) + state.inventory_logs,
    })
    return _applied(new_state, product)


def _apply_purchase(state: AppState, product: Product, quantity: float, rate: float, now: int) -> OperationResult:
    new_rate = ledger.weighted_average_cost(product.current_stock, product.avg_purchase_rate, quantity, rate)
    updated = product.model_copy(update={
        "avg_purchase_rate": new_rate,
        "current_stock": product.current_stock + quantity,
        "last_updated": now,
    })
    transaction = Transaction(
        id=_new_id(),
        product_id=product.id,
        product_name=product.name,
        type="purchase",
        quantity=quantity,
        rate=rate,
        total=quantity * rate,
        timestamp=now,
    )
    log = _log_entry(product, "purchase", quantity, f"New purchase added (Rate: ₹{_fmt(rate)})", now)

    new_state = state.model_copy(update={
        "inventory": _replace(state.inventory, updated),
        "transactions": (transaction,) + state.transactions,
        "inventory_logs": (log,) + state.inventory_logs,
    })
    return _applied(new_state, transaction)


def record_purchase(state: AppState, product_id: str, quantity: float, rate: float, now: Optional[int] = None) -> OperationResult:
    """Restock an existing product and fold the purchase into its average cost."""
    _require_positive(quantity)
    _require_non_negative(rate, "Rate")
    product = ledger.find_product(state, product_id)
    if product is None:
        return _not_found(state)
    return _apply_purchase(state, product, quantity, rate, now if now is not None else _now_ms())


def record_new_product_purchase(
    state: AppState,
    name: str,
    unit: str,
    quantity: float,
    rate: float,
    markup: float = DEFAULT_MARKUP,
    now: Optional[int] = None,
) -> OperationResult:
    """Buy a product that is not catalogued yet; its sale rate defaults to rate * markup."""
    name = _require_text(name, "Product name")
    unit = _require_unit(unit)
    _require_positive(quantity)
    _require_non_negative(rate, "Rate")
    now = now if now is not None else _now_ms()

    product = Product(
        id=_new_id(),
        name=name,
        unit=unit,
        current_stock=0,
        avg_purchase_rate=rate,
        sale_rate=rate * markup,
        created_at=now,
        last_updated=now,
    )
    with_product = state.model_copy(update={"inventory": state.inventory + (product,)})
    return _apply_purchase(with_product, product, quantity, rate, now)


def edit_product(
    state: AppState,
    product_id: str,
    name: str,
    unit: str,
    stock: float,
    purchase_rate: float,
    sale_rate: float,
    now: Optional[int] = None,
) -> OperationResult:
    """Overwrite a product. Existing transactions keep their profit and name snapshots."""
    product = ledger.find_product(state, product_id)
    if product is None:
        return _not_found(state)
    name = _require_text(name, "Product name")
    unit = _require_unit(unit)
    _require_non_negative(stock, "Stock")
    _require_non_negative(purchase_rate, "Purchase rate")
    _require_non_negative(sale_rate, "Sale rate")
    now = now if now is not None else _now_ms()

    updated = product.model_copy(update={
        "name": name,
        "unit": unit,
        "current_stock": stock,
        "avg_purchase_rate": purchase_rate,
        "sale_rate": sale_rate,
        "last_updated": now,
    })
    logs = state.inventory_logs
    stock_diff = stock - product.current_stock
    if stock_diff != 0:
        reason = f"Manual stock edit from {_fmt(product.current_stock)} to {_fmt(stock)}"
        logs = (_log_entry(updated, "manual", stock_diff, reason, now),) + logs

    new_state = state.model_copy(update={
        "inventory": _replace(state.inventory, updated),
        "inventory_logs": logs,
    })
    return _applied(new_state, updated)


def adjust_stock(state: AppState, product_id: str, change: float, reason: str, now: Optional[int] = None) -> OperationResult:
    """Apply a signed manual correction to the warehouse stock.

    Adjustments that would take the stock below zero are rejected.
    """
    product = ledger.find_product(state, product_id)
    if product is None:
        return _not_found(state)
    reason = _require_text(reason, "Reason")
    if not change:
        raise ValidationRejected("Stock change cannot be zero")
    new_stock = product.current_stock + change
    if new_stock < 0:
        raise ValidationRejected(
            f"Stock of '{product.name}' cannot go below zero ({_fmt(product.current_stock)} {product.unit} available)"
        )
    now = now if now is not None else _now_ms()

    updated = product.model_copy(update={"current_stock": new_stock, "last_updated": now})
    log = _log_entry(product, "manual", change, reason, now)
    new_state = state.model_copy(update={
        "inventory": _replace(state.inventory, updated),
        "inventory_logs": (log,) + state.inventory_logs,
    })
    logger.info("Stock of %s adjusted by %s: %s", product.id, change, reason)
    return _applied(new_state, log)


# =========================
# CLIENTS
# =========================
def register_client(state: AppState, name: str, phone: str = "", address: str = "", now: Optional[int] = None) -> OperationResult:
    name = _require_text(name, "Client name")
    client = Client(
        id=_new_id(),
        name=name,
        phone=(phone or "").strip(),
        address=(address or "").strip(),
        created_at=now if now is not None else _now_ms(),
    )
    return _applied(state.model_copy(update={"clients": state.clients + (client,)}), client)


def edit_client(state: AppState, client_id: str, name: str, phone: str = "", address: str = "") -> OperationResult:
    client = ledger.find_client(state, client_id)
    if client is None:
        return _not_found(state)
    name = _require_text(name, "Client name")
    updated = client.model_copy(update={
        "name": name,
        "phone": (phone or "").strip(),
        "address": (address or "").strip(),
    })
    return _applied(state.model_copy(update={"clients": _replace(state.clients, updated)}), updated)


# =========================
# SALES
# =========================
def dispatch_to_client(
    state: AppState,
    client_id: str,
    product_id: str,
    quantity: float,
    rate: float,
    timestamp: Optional[int] = None,
    now: Optional[int] = None,
) -> OperationResult:
    """Send warehouse stock to a client and issue the next bill.

    Profit is fixed here from the product's current average cost. The invoice
    document is requested through an ``InvoiceRequested`` event, published
    only after the new state has been committed.
    """
    client = ledger.find_client(state, client_id)
    product = ledger.find_product(state, product_id)
    if client is None or product is None:
        raise ValidationRejected("Invalid client or product selection")
    _require_positive(quantity)
    _require_non_negative(rate, "Rate")
    if product.current_stock < quantity:
        raise ValidationRejected(
            f"Insufficient stock for '{product.name}': {_fmt(product.current_stock)} {product.unit} available"
        )
    now = now if now is not None else _now_ms()
    bill_date = timestamp if timestamp is not None else now

    bill_number = ledger.format_bill_number(state.settings.next_bill_no)
    total = quantity * rate
    transaction = Transaction(
        id=_new_id(),
        client_id=client.id,
        product_id=product.id,
        product_name=product.name,
        type="dispatch",
        quantity=quantity,
        rate=rate,
        total=total,
        profit=(rate - product.avg_purchase_rate) * quantity,
        bill_number=bill_number,
        timestamp=bill_date,
    )
    updated = product.model_copy(update={
        "current_stock": product.current_stock - quantity,
        "last_updated": now,
    })
    log = _log_entry(product, "dispatch", -quantity, f"Dispatched to client: {client.name} (Ref: {bill_number})", now)

    new_state = state.model_copy(update={
        "inventory": _replace(state.inventory, updated),
        "transactions": (transaction,) + state.transactions,
        "inventory_logs": (log,) + state.inventory_logs,
        "settings": state.settings.model_copy(update={"next_bill_no": state.settings.next_bill_no + 1}),
    })

    document = ledger.invoice_document(new_state, transaction)
    logger.info("Dispatch %s: %s x %s to client %s", bill_number, quantity, product.id, client.id)
    return _applied(new_state, transaction, [InvoiceRequested(transaction_id=transaction.id, document=document)])


def report_client_sale(
    state: AppState,
    client_id: str,
    product_id: str,
    quantity: float,
    rate: float,
    now: Optional[int] = None,
) -> OperationResult:
    """Record a sale a client made from the stock it holds. Warehouse stock is untouched."""
    client = ledger.find_client(state, client_id)
    product = ledger.find_product(state, product_id)
    if client is None or product is None:
        return _not_found(state)
    _require_positive(quantity)
    _require_non_negative(rate, "Rate")
    if ledger.client_stock_balance(state, client.id, product.id) < quantity:
        raise ValidationRejected("Client does not have enough stock to fulfill this sale.")

    transaction = Transaction(
        id=_new_id(),
        client_id=client.id,
        product_id=product.id,
        product_name=product.name,
        type="client_sale",
        quantity=quantity,
        rate=rate,
        total=quantity * rate,
        timestamp=now if now is not None else _now_ms(),
    )
    new_state = state.model_copy(update={"transactions": (transaction,) + state.transactions})
    return _applied(new_state, transaction)


def edit_transaction(
    state: AppState,
    transaction_id: str,
    quantity: float,
    rate: float,
    client_id: Optional[str] = None,
    product_id: Optional[str] = None,
    now: Optional[int] = None,
) -> OperationResult:
    """Amend quantity, rate, client or product of a transaction.

    The old stock effect is reversed on the old product and the new effect
    applied to the new product, with one inventory log per product whose
    stock moved. Dispatch profit is recomputed from the current average cost;
    the bill number never changes and the invoice is requested again.
    """
    transaction = ledger.find_transaction(state, transaction_id)
    if transaction is None:
        return _not_found(state)
    _require_positive(quantity)
    _require_non_negative(rate, "Rate")
    now = now if now is not None else _now_ms()

    product_id = product_id or transaction.product_id
    client_id = client_id if client_id is not None else transaction.client_id
    product = ledger.find_product(state, product_id)
    if product is None and product_id != transaction.product_id:
        raise ValidationRejected(f"Product {product_id} not found")
    if transaction.type != "purchase" and ledger.find_client(state, client_id) is None:
        raise ValidationRejected(f"Client {client_id} not found")

    # Net stock delta per product: undo the old entry, apply the new one
    sign = _STOCK_SIGN[transaction.type]
    deltas: Dict[str, float] = {}
    if sign:
        deltas[transaction.product_id] = deltas.get(transaction.product_id, 0) - sign * transaction.quantity
        deltas[product_id] = deltas.get(product_id, 0) + sign * quantity

    inventory = state.inventory
    logs = state.inventory_logs
    reference = transaction.bill_number or transaction.type
    for pid, delta in deltas.items():
        target = ledger.find_product(state, pid)
        if not delta or target is None:
            continue
        new_stock = target.current_stock + delta
        if new_stock < 0:
            raise ValidationRejected(
                f"Stock of '{target.name}' cannot go below zero ({_fmt(target.current_stock)} {target.unit} available)"
            )
        inventory = _replace(inventory, target.model_copy(update={"current_stock": new_stock, "last_updated": now}))
        reason = f"Transaction edit ({reference}): quantity {_fmt(transaction.quantity)} -> {_fmt(quantity)}"
        logs = (_log_entry(target, transaction.type, delta, reason, now),) + logs

    profit = transaction.profit
    if transaction.type == "dispatch" and product is not None:
        profit = (rate - product.avg_purchase_rate) * quantity

    updated = transaction.model_copy(update={
        "client_id": client_id,
        "product_id": product_id,
        "product_name": product.name if product is not None else transaction.product_name,
        "quantity": quantity,
        "rate": rate,
        "total": quantity * rate,
        "profit": profit,
    })
    new_state = state.model_copy(update={
        "inventory": inventory,
        "inventory_logs": logs,
        "transactions": _replace(state.transactions, updated),
    })

    # A client may not end up having sold more than it was given
    if transaction.type in ("dispatch", "client_sale"):
        pairs = {(transaction.client_id, transaction.product_id), (client_id, product_id)}
        for pair_client, pair_product in pairs:
            after = ledger.client_stock_balance(new_state, pair_client, pair_product)
            before = ledger.client_stock_balance(state, pair_client, pair_product)
            if after < 0 and after < before:
                raise ValidationRejected("Edit would leave the client with negative stock in hand")

    events = []
    if updated.type == "dispatch":
        # The stored invoice is rendered again with the amended figures
        events.append(InvoiceRequested(transaction_id=updated.id, document=ledger.invoice_document(new_state, updated)))
    return _applied(new_state, updated, events)


# =========================
# SETTINGS
# =========================
def update_settings(state: AppState, company_name: str) -> OperationResult:
    company_name = _require_text(company_name, "Company name")
    settings = state.settings.model_copy(update={"company_name": company_name})
    return _applied(state.model_copy(update={"settings": settings}), settings)
