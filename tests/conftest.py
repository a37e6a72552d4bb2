# tests/conftest.py
import os
import tempfile

# Settings are read at import time, so the environment is prepared first
_storage = tempfile.mkdtemp(prefix="billstock-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INVOICE_DIR"] = os.path.join(_storage, "invoices")
os.environ["EXPORT_DIR"] = os.path.join(_storage, "exports")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import init_db
from schemas.state import AppState
from services import operations
from services.events import InvoiceRequested
from services.store import StateStore
from utils.pdf import save_invoice_document
from utils.persistence import StateRepository

NOW = 1_700_000_000_000


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def empty_state():
    return AppState.empty()


@pytest.fixture
def seeded(empty_state):
    """Cement (20 bags @ 300) and one client, nothing sold yet."""
    state = empty_state
    product = operations.register_product(
        state, "Cement", "bags", stock=20, purchase_rate=300, sale_rate=360, now=NOW
    )
    state = product.state
    client = operations.register_client(state, "Ravi Traders", phone="9876543210", address="12 Market Road", now=NOW)
    return client.state, product.entity, client.entity


@pytest.fixture
def repository(session_factory):
    return StateRepository(session_factory, "test_state", default=AppState.empty())


@pytest.fixture
def store(repository):
    store = StateStore(repository=repository)
    store.bus.subscribe(InvoiceRequested, save_invoice_document)
    return store
