"""Payment details and the one-default-per-user rule.

Setting is_default=True first clears the flag on the user's other rows,
then writes, inside one transaction. The partial unique index on
payment_details (see the model) turns a lost race into an IntegrityError,
which the HTTP layer reports as 409.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from invoice_server.core.audit import AuditLog
from invoice_server.core.exceptions import BusinessError, InvalidClient, InvalidInvoice
from invoice_server.db.base import record_id_in_range
from invoice_server.db.unit_of_work import unit_of_work
from invoice_server.models.client import Client
from invoice_server.models.invoice import Invoice
from invoice_server.models.payment_detail import PaymentDetail
from invoice_server.schemas.payment_detail import PaymentDetailCreate

logger = logging.getLogger(__name__)


def list_payment_details(db: Session, user_id: int) -> List[PaymentDetail]:
    return (
        db.query(PaymentDetail)
        .filter(PaymentDetail.user_id == user_id)
        .order_by(PaymentDetail.is_default.desc(), PaymentDetail.created_at.desc(), PaymentDetail.id.desc())
        .all()
    )


def get_payment_detail(db: Session, user_id: int, detail_id: int) -> PaymentDetail:
    detail = None
    if record_id_in_range(detail_id):
        detail = (
            db.query(PaymentDetail)
            .filter(PaymentDetail.id == detail_id, PaymentDetail.user_id == user_id)
            .first()
        )
    if not detail:
        raise BusinessError.not_found("Payment details")
    return detail


def clear_default(db: Session, user_id: int, keep_id: Optional[int] = None) -> int:
    """Unset is_default on the user's rows (except keep_id). Returns rows touched."""
    query = db.query(PaymentDetail).filter(
        PaymentDetail.user_id == user_id,
        PaymentDetail.is_default.is_(True),
    )
    if keep_id is not None:
        query = query.filter(PaymentDetail.id != keep_id)
    return query.update({PaymentDetail.is_default: False}, synchronize_session="fetch")


def _check_references(db: Session, user_id: int, data: PaymentDetailCreate) -> None:
    if db.query(Client.id).filter(Client.id == data.client_id).first() is None:
        raise InvalidClient()
    if data.invoice_id is not None:
        owned = (
            db.query(Invoice.id)
            .filter(Invoice.id == data.invoice_id, Invoice.user_id == user_id)
            .first()
        )
        if owned is None:
            raise InvalidInvoice()


def _apply(detail: PaymentDetail, data: PaymentDetailCreate) -> None:
    detail.client_id = data.client_id
    detail.invoice_id = data.invoice_id
    detail.method = data.method
    detail.account_name = data.account_name
    detail.account_number = data.account_number
    detail.bank_name = data.bank_name
    detail.swift_code = data.swift_code
    detail.is_default = data.is_default


def create_payment_detail(db: Session, user_id: int, data: PaymentDetailCreate) -> PaymentDetail:
    with unit_of_work(db):
        _check_references(db, user_id, data)
        if data.is_default:
            cleared = clear_default(db, user_id)
            logger.debug(f"Cleared default flag on {cleared} payment detail(s) for user {user_id}")
        detail = PaymentDetail(user_id=user_id)
        _apply(detail, data)
        db.add(detail)
        db.flush()

    AuditLog.log_action("create", "payment_detail", detail.id, user_id, changes={"is_default": detail.is_default})
    return detail


def update_payment_detail(
    db: Session, user_id: int, detail_id: int, data: PaymentDetailCreate
) -> PaymentDetail:
    with unit_of_work(db):
        detail = get_payment_detail(db, user_id, detail_id)
        _check_references(db, user_id, data)
        if data.is_default:
            clear_default(db, user_id, keep_id=detail.id)
        _apply(detail, data)

    AuditLog.log_action("update", "payment_detail", detail.id, user_id, changes={"is_default": detail.is_default})
    return detail


def delete_payment_detail(db: Session, user_id: int, detail_id: int) -> None:
    with unit_of_work(db):
        detail = get_payment_detail(db, user_id, detail_id)
        db.delete(detail)

    AuditLog.log_action("delete", "payment_detail", detail_id, user_id)
