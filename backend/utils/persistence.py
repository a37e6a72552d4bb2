# backend/utils/persistence.py
import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from models.state import AppStateRecord
from schemas.state import AppState

logger = logging.getLogger(__name__)


def load_state(db: Session, key: str, default: Optional[AppState] = None) -> AppState:
    """Read the snapshot stored under ``key``, or ``default`` (an empty ledger) if absent."""
    record = db.get(AppStateRecord, key)
    if record is None:
        return default if default is not None else AppState.empty()
    return AppState.model_validate(record.payload)


def save_state(db: Session, key: str, state: AppState) -> None:
    """Rewrite the whole snapshot under ``key``."""
    payload = state.model_dump(mode="json", by_alias=True, exclude_none=True)
    record = db.get(AppStateRecord, key)
    if record is None:
        db.add(AppStateRecord(key=key, payload=payload))
    else:
        record.payload = payload
    db.commit()


class StateRepository:
    """Single-key storage of the ledger snapshot, one short session per call."""

    def __init__(self, session_factory: sessionmaker, key: str, default: Optional[AppState] = None):
        self.session_factory = session_factory
        self.key = key
        self.default = default

    def load(self) -> AppState:
        db = self.session_factory()
        try:
            state = load_state(db, self.key, self.default)
        finally:
            db.close()
        logger.info(
            "Loaded state '%s': %d products, %d clients, %d transactions",
            self.key, len(state.inventory), len(state.clients), len(state.transactions),
        )
        return state

    def save(self, state: AppState) -> None:
        db = self.session_factory()
        try:
            save_state(db, self.key, state)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
