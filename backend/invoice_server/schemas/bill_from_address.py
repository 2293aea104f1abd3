from datetime import datetime
from typing import Optional

from pydantic import EmailStr

from invoice_server.schemas.common import CamelModel, NonEmptyStr


class BillFromAddressCreate(CamelModel):
    company_name: NonEmptyStr
    address: NonEmptyStr
    city: NonEmptyStr
    postal_code: NonEmptyStr
    country: NonEmptyStr
    email: EmailStr
    phone: NonEmptyStr


BillFromAddressUpdate = BillFromAddressCreate


class BillFromAddressResponse(CamelModel):
    id: int
    company_name: str
    address: str
    city: str
    postal_code: str
    country: str
    email: str
    phone: str
    created_at: Optional[datetime] = None
