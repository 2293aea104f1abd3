from datetime import datetime
from typing import Optional

from pydantic import EmailStr, field_validator

from invoice_server.schemas.common import CamelModel, NonEmptyStr, blank_to_none


class ClientCreate(CamelModel):
    """Create and full-replace update share one shape: only name is required."""
    name: NonEmptyStr
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    tax_id: Optional[str] = None
    notes: Optional[str] = None

    @field_validator(
        "email", "phone", "address", "city", "postal_code", "country", "tax_id", "notes",
        mode="before",
    )
    @classmethod
    def empty_as_missing(cls, v):
        return blank_to_none(v)


ClientUpdate = ClientCreate


class ClientResponse(CamelModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
