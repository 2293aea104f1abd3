"""Invoice payloads.

Money arrives as JSON numbers and is converted with Decimal(str(x)) at the
storage boundary. Line-item totals are trusted as sent.
"""
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from invoice_server.db.base import MAX_INTEGER
from invoice_server.schemas.bill_from_address import BillFromAddressResponse
from invoice_server.schemas.common import CamelModel, NonEmptyStr, RecordId, blank_to_none

InvoiceStatus = Literal["pending", "paid", "partially_paid", "overdue"]


class InvoiceItemCreate(CamelModel):
    description: NonEmptyStr
    quantity: int = Field(gt=0, le=MAX_INTEGER)
    unit_price: float = Field(ge=0)
    total: float = Field(ge=0)


class InvoiceCreate(CamelModel):
    # Generated as INV-YYYY-MM-NNNN when omitted
    invoice_number: Optional[str] = Field(default=None, max_length=100)
    invoice_date: date
    due_date: date
    client_id: RecordId
    bill_from_id: Optional[RecordId] = None
    items: List[InvoiceItemCreate] = Field(min_length=1)
    subtotal: float = Field(ge=0)
    tax_rate: float = Field(ge=0, le=100)
    tax_amount: float = Field(ge=0)
    total: float = Field(gt=0)
    status: InvoiceStatus = "pending"
    amount_paid: float = Field(default=0, ge=0)
    notes: Optional[str] = None

    @field_validator("invoice_number", mode="before")
    @classmethod
    def blank_number_means_generate(cls, v):
        return blank_to_none(v)

    @model_validator(mode="after")
    def due_not_before_issue(self) -> "InvoiceCreate":
        if self.due_date < self.invoice_date:
            raise ValueError("dueDate must not be earlier than invoiceDate")
        return self


class InvoiceStatusUpdate(CamelModel):
    status: InvoiceStatus
    amount_paid: float = Field(ge=0)
    notes: Optional[str] = None


class InvoiceItemResponse(CamelModel):
    description: str
    quantity: int
    unit_price: float
    total: float


class InvoiceClientSummary(CamelModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    tax_id: Optional[str] = None


class InvoiceResponse(CamelModel):
    id: int
    invoice_number: str
    invoice_date: date
    due_date: date
    client: Optional[InvoiceClientSummary] = None
    bill_from: Optional[BillFromAddressResponse] = None
    items: List[InvoiceItemResponse] = []
    subtotal: float
    tax_rate: float
    tax_amount: float
    total: float
    status: str
    amount_paid: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreatedInvoice(CamelModel):
    """Creation echo: header as stored plus the items exactly as submitted."""
    id: int
    invoice_number: str
    invoice_date: date
    due_date: date
    client_id: int
    bill_from_id: Optional[int] = None
    items: List[InvoiceItemResponse]
    subtotal: float
    tax_rate: float
    tax_amount: float
    total: float
    status: str
    amount_paid: float
    notes: Optional[str] = None


class InvoiceStatusResponse(CamelModel):
    id: int
    status: str
    amount_paid: float
    notes: Optional[str] = None
