"""Invoices for the authenticated user.

Creation goes through services.invoice_service (the transactional
numbering + insert protocol). Reads embed client, bill-from and items.
"""
from datetime import datetime
from decimal import Decimal
from typing import Callable

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload, selectinload

from invoice_server.api.deps import get_clock, get_db, get_current_user_id
from invoice_server.core.audit import AuditLog
from invoice_server.core.exceptions import BusinessError
from invoice_server.db.base import record_id_in_range
from invoice_server.db.unit_of_work import unit_of_work
from invoice_server.models.invoice import Invoice
from invoice_server.schemas.invoice import (
    CreatedInvoice,
    InvoiceCreate,
    InvoiceItemResponse,
    InvoiceResponse,
    InvoiceStatusResponse,
    InvoiceStatusUpdate,
)
from invoice_server.services.invoice_service import create_invoice

router = APIRouter()


def _owned_invoices(db: Session, user_id: int):
    return (
        db.query(Invoice)
        .options(
            joinedload(Invoice.client),
            joinedload(Invoice.bill_from),
            selectinload(Invoice.items),
        )
        .filter(Invoice.user_id == user_id)
    )


def _get_invoice(query, invoice_id: int) -> Invoice:
    invoice = None
    if record_id_in_range(invoice_id):
        invoice = query.filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise BusinessError.not_found("Invoice")
    return invoice


@router.post("", status_code=status.HTTP_201_CREATED)
def create_invoice_route(
    data: InvoiceCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Create an invoice with its line items in one transaction.

    invoiceNumber is optional; when omitted the next INV-YYYY-MM-NNNN for
    the current month is assigned. Items are echoed back as submitted.
    """
    invoice = create_invoice(db, user_id, data, clock=clock)

    created = CreatedInvoice(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        invoice_date=data.invoice_date,
        due_date=data.due_date,
        client_id=data.client_id,
        bill_from_id=data.bill_from_id,
        items=[InvoiceItemResponse.model_validate(item.model_dump()) for item in data.items],
        subtotal=data.subtotal,
        tax_rate=data.tax_rate,
        tax_amount=data.tax_amount,
        total=data.total,
        status=data.status,
        amount_paid=data.amount_paid,
        notes=data.notes,
    )
    return {"message": "Invoice created successfully", "invoice": created}


@router.get("")
def list_invoices(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    invoices = _owned_invoices(db, user_id).order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()
    return {"invoices": [InvoiceResponse.model_validate(inv) for inv in invoices]}


@router.get("/{invoice_id}")
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    invoice = _get_invoice(_owned_invoices(db, user_id), invoice_id)
    return {"invoice": InvoiceResponse.model_validate(invoice)}


@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Deletes the invoice together with its items and payment details."""
    with unit_of_work(db):
        invoice = _get_invoice(db.query(Invoice).filter(Invoice.user_id == user_id), invoice_id)
        invoice_number = invoice.invoice_number
        db.delete(invoice)

    AuditLog.log_action("delete", "invoice", invoice_id, user_id, changes={"invoice_number": invoice_number})
    return {"message": "Invoice deleted successfully"}


@router.put("/{invoice_id}/status")
def update_invoice_status(
    invoice_id: int,
    data: InvoiceStatusUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Record status and amount paid. amountPaid is not checked against total."""
    with unit_of_work(db):
        invoice = _get_invoice(db.query(Invoice).filter(Invoice.user_id == user_id), invoice_id)
        previous_status = invoice.status
        invoice.status = data.status
        invoice.amount_paid = Decimal(str(data.amount_paid))
        invoice.notes = data.notes or None

    AuditLog.log_action(
        "status_change",
        "invoice",
        invoice_id,
        user_id,
        changes={"from": previous_status, "to": data.status, "amount_paid": data.amount_paid},
    )
    return {
        "message": "Invoice status updated successfully",
        "invoice": InvoiceStatusResponse(
            id=invoice_id, status=data.status, amount_paid=data.amount_paid, notes=data.notes
        ),
    }
