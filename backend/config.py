# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./billstock.db"

    # Storage key of the serialized state blob
    STATE_KEY: str = "billstock_data"

    # Defaults used when no state has been persisted yet
    COMPANY_NAME: str = "NexGen Solutions"
    FIRST_BILL_NO: int = 1001

    # Sale rate = purchase rate * markup for products created through a purchase
    DEFAULT_MARKUP: float = 1.2
    LOW_STOCK_THRESHOLD: float = 10

    INVOICE_DIR: str = "storage/invoices"
    EXPORT_DIR: str = "storage/exports"

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
