# backend/schemas/client.py
from pydantic import BaseModel, Field
from typing import List

from schemas.base import EntityBase


# A downstream partner who receives dispatched stock and may resell it
class Client(EntityBase):
    id: str
    name: str
    phone: str = ""
    address: str = ""
    created_at: int


# Schema for registering a client
class ClientCreate(BaseModel):
    name: str = Field(min_length=1)
    phone: str = ""
    address: str = ""


# Schema for client edits - name, phone and address are overwritten
class ClientUpdate(BaseModel):
    name: str = Field(min_length=1)
    phone: str = ""
    address: str = ""


class ClientList(BaseModel):
    items: List[Client]
    total: int
