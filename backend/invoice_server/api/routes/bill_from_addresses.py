"""Bill-from addresses: the sender profiles a user issues invoices under."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from invoice_server.api.deps import get_db, get_current_user_id
from invoice_server.core.audit import AuditLog
from invoice_server.core.exceptions import BusinessError
from invoice_server.db.base import record_id_in_range
from invoice_server.db.unit_of_work import unit_of_work
from invoice_server.models.bill_from_address import BillFromAddress
from invoice_server.models.invoice import Invoice
from invoice_server.schemas.bill_from_address import (
    BillFromAddressCreate,
    BillFromAddressResponse,
    BillFromAddressUpdate,
)

router = APIRouter()


def _get_owned(db: Session, address_id: int, user_id: int) -> BillFromAddress:
    address = None
    if record_id_in_range(address_id):
        address = (
            db.query(BillFromAddress)
            .filter(BillFromAddress.id == address_id, BillFromAddress.user_id == user_id)
            .first()
        )
    if not address:
        raise BusinessError.not_found("Bill from address")
    return address


def _apply(address: BillFromAddress, data: BillFromAddressCreate) -> None:
    address.company_name = data.company_name
    address.address = data.address
    address.city = data.city
    address.postal_code = data.postal_code
    address.country = data.country
    address.email = data.email
    address.phone = data.phone


@router.post("", status_code=status.HTTP_201_CREATED)
def create_bill_from_address(
    data: BillFromAddressCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    with unit_of_work(db):
        address = BillFromAddress(user_id=user_id)
        _apply(address, data)
        db.add(address)
    db.refresh(address)

    AuditLog.log_action("create", "bill_from_address", address.id, user_id)
    return {
        "message": "Bill from address created successfully",
        "billFromAddress": BillFromAddressResponse.model_validate(address),
    }


@router.get("")
def list_bill_from_addresses(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    addresses = (
        db.query(BillFromAddress)
        .filter(BillFromAddress.user_id == user_id)
        .order_by(BillFromAddress.created_at.desc(), BillFromAddress.id.desc())
        .all()
    )
    return {"billFromAddresses": [BillFromAddressResponse.model_validate(a) for a in addresses]}


@router.get("/{address_id}")
def get_bill_from_address(
    address_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return {"billFromAddress": BillFromAddressResponse.model_validate(_get_owned(db, address_id, user_id))}


@router.put("/{address_id}")
def update_bill_from_address(
    address_id: int,
    data: BillFromAddressUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    with unit_of_work(db):
        address = _get_owned(db, address_id, user_id)
        _apply(address, data)
    db.refresh(address)

    AuditLog.log_action("update", "bill_from_address", address_id, user_id)
    return {
        "message": "Bill from address updated successfully",
        "billFromAddress": BillFromAddressResponse.model_validate(address),
    }


@router.delete("/{address_id}")
def delete_bill_from_address(
    address_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Refused with 409 while any invoice is issued from this address."""
    with unit_of_work(db):
        address = _get_owned(db, address_id, user_id)
        in_use = db.query(Invoice.id).filter(Invoice.bill_from_id == address_id).first()
        if in_use:
            raise BusinessError.dependency_conflict(
                "Cannot delete address",
                "This address is being used in existing invoices",
            )
        db.delete(address)

    AuditLog.log_action("delete", "bill_from_address", address_id, user_id)
    return {"message": "Bill from address deleted successfully"}
