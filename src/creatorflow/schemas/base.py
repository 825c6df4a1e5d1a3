from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, field_validator

class ORMBase(BaseModel):
    """Base for read schemas built from ORM rows or stored JSON records.

    Timestamps without tzinfo (sqlite drops it) are read as UTC so records
    from every backend compare and serialize the same way.
    """
    model_config = ConfigDict(from_attributes=True)

    @field_validator("*", mode="after")
    @classmethod
    def _assume_utc(cls, v):
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
