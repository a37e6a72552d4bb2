from sqlalchemy import Column, String, DateTime, JSON, func
from database import Base

# Holds the serialized application state, one row per storage key.
# The payload is the whole snapshot (inventory, logs, clients,
# transactions, settings) and is rewritten on every save.
class AppStateRecord(Base):
    __tablename__ = "app_state"

    key = Column(String(100), primary_key=True)
    payload = Column(JSON, nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
