# schemas/invoice.py
from pydantic import BaseModel


# Buyer block printed on the invoice
class InvoiceParty(BaseModel):
    name: str
    phone: str = ""
    address: str = ""


# Single invoice line
class InvoiceLine(BaseModel):
    name: str
    quantity: float
    rate: float
    total: float
    unit: str


# Consistent snapshot handed to the invoice document generator
class InvoiceDocument(BaseModel):
    company_name: str
    bill_number: str
    client: InvoiceParty
    product: InvoiceLine
    date: str
