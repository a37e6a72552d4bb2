from pydantic import BaseModel, Field


# Schema for displaying the company settings
class CompanyOut(BaseModel):
    company_name: str
    next_bill_no: int
    next_bill_number: str


# Schema for updating the company name.
# The bill sequence is not editable.
class CompanyUpdate(BaseModel):
    company_name: str = Field(min_length=1)
