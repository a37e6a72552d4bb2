# backend/schemas/base.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# Base configuration for ledger entities.
# Snapshots are immutable and serialized with camelCase keys,
# which is also the layout of the persisted state blob.
class EntityBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )
