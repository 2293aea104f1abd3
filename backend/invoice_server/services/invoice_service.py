"""Invoice creation protocol.

One call = one transaction:

    1. explicit number given -> must be unused        (DuplicateInvoiceNumber)
    2. client must exist                               (InvalidClient)
    3. bill-from given -> must exist and be the user's (InvalidBillFromAddress)
    4. resolve the number (explicit, or next INV-YYYY-MM-NNNN)
    5. insert invoice, then each item in submitted order
    6. commit

Gates 1-3 run before any write. Any failure in 4-6 rolls the whole thing
back, so no invoice without its items (or items without their invoice)
ever becomes visible. Two writers racing for the same number are settled
by the UNIQUE constraint: the loser's insert fails, is rolled back, and is
reported as DuplicateInvoiceNumber.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoice_server.core.audit import AuditLog
from invoice_server.core.exceptions import (
    DuplicateInvoiceNumber,
    InvalidBillFromAddress,
    InvalidClient,
)
from invoice_server.db.unit_of_work import unit_of_work
from invoice_server.models.bill_from_address import BillFromAddress
from invoice_server.models.client import Client
from invoice_server.models.invoice import Invoice
from invoice_server.models.invoice_item import InvoiceItem
from invoice_server.schemas.invoice import InvoiceCreate
from invoice_server.services.invoice_numbering import generate_invoice_number

logger = logging.getLogger(__name__)


def _money(value: float) -> Decimal:
    return Decimal(str(value))


def invoice_number_taken(db: Session, invoice_number: str) -> bool:
    return (
        db.query(Invoice.id).filter(Invoice.invoice_number == invoice_number).first()
        is not None
    )


def client_exists(db: Session, client_id: int) -> bool:
    return db.query(Client.id).filter(Client.id == client_id).first() is not None


def bill_from_owned_by(db: Session, bill_from_id: int, user_id: int) -> bool:
    return (
        db.query(BillFromAddress.id)
        .filter(BillFromAddress.id == bill_from_id, BillFromAddress.user_id == user_id)
        .first()
        is not None
    )


def check_invoice_references(db: Session, user_id: int, data: InvoiceCreate) -> None:
    """Gates that must pass before anything is written."""
    if data.invoice_number and invoice_number_taken(db, data.invoice_number):
        raise DuplicateInvoiceNumber(data.invoice_number)

    if not client_exists(db, data.client_id):
        logger.info(f"Invoice rejected: client {data.client_id} does not exist")
        raise InvalidClient()

    if data.bill_from_id is not None and not bill_from_owned_by(db, data.bill_from_id, user_id):
        logger.info(
            f"Invoice rejected: bill-from {data.bill_from_id} missing or not owned by user {user_id}"
        )
        raise InvalidBillFromAddress()


def _insert_invoice(db: Session, user_id: int, data: InvoiceCreate, invoice_number: str) -> Invoice:
    invoice = Invoice(
        user_id=user_id,
        client_id=data.client_id,
        invoice_number=invoice_number,
        invoice_date=data.invoice_date,
        due_date=data.due_date,
        bill_from_id=data.bill_from_id,
        subtotal=_money(data.subtotal),
        tax_rate=_money(data.tax_rate),
        tax_amount=_money(data.tax_amount),
        total=_money(data.total),
        status=data.status,
        amount_paid=_money(data.amount_paid),
        notes=data.notes or "",
    )
    db.add(invoice)
    db.flush()  # Get ID without committing

    for item in data.items:
        db.add(
            InvoiceItem(
                invoice_id=invoice.id,
                description=item.description,
                quantity=item.quantity,
                unit_price=_money(item.unit_price),
                total=_money(item.total),
            )
        )
        # One statement per item so a bad row fails right here, in order
        db.flush()

    return invoice


def create_invoice(
    db: Session,
    user_id: int,
    data: InvoiceCreate,
    clock: Callable[[], datetime] = datetime.now,
) -> Invoice:
    """Create an invoice and its items atomically. Returns the committed invoice.

    Raises:
        DuplicateInvoiceNumber: the number is already used (checked up front,
            or discovered when the insert loses a race).
        InvalidClient / InvalidBillFromAddress: a reference gate failed.
        IntegrityError / other DB errors: after a full rollback.
    """
    invoice_number: Optional[str] = data.invoice_number
    try:
        with unit_of_work(db):
            check_invoice_references(db, user_id, data)
            if not invoice_number:
                invoice_number = generate_invoice_number(db, clock())
            invoice = _insert_invoice(db, user_id, data, invoice_number)
    except IntegrityError as exc:
        # Rolled back already; a committed row with our number means we lost a race
        if invoice_number and invoice_number_taken(db, invoice_number):
            logger.info(f"Invoice number {invoice_number} taken concurrently; creation rolled back")
            raise DuplicateInvoiceNumber(invoice_number) from exc
        logger.error(f"Invoice creation rolled back: {exc.orig}")
        raise

    logger.info(
        f"Created invoice {invoice.invoice_number} (id={invoice.id}) "
        f"with {len(data.items)} item(s) for user {user_id}"
    )
    AuditLog.log_action(
        "create",
        "invoice",
        invoice.id,
        user_id,
        changes={"invoice_number": invoice.invoice_number, "total": data.total},
    )
    return invoice
