from datetime import datetime
from typing import Optional

from invoice_server.schemas.common import CamelModel, NonEmptyStr, RecordId


class PaymentDetailCreate(CamelModel):
    client_id: RecordId
    invoice_id: Optional[RecordId] = None
    method: NonEmptyStr
    account_name: NonEmptyStr
    account_number: NonEmptyStr
    bank_name: NonEmptyStr
    swift_code: NonEmptyStr
    is_default: bool = False


PaymentDetailUpdate = PaymentDetailCreate


class PaymentDetailResponse(CamelModel):
    id: int
    client_id: int
    invoice_id: Optional[int] = None
    method: str
    account_name: str
    account_number: str
    bank_name: str
    swift_code: str
    is_default: bool
    created_at: Optional[datetime] = None
