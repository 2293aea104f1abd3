"""Clients: invoice recipients. Shared across users."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload, selectinload

from invoice_server.api.deps import get_db, get_current_user_id
from invoice_server.core.audit import AuditLog
from invoice_server.core.exceptions import BusinessError
from invoice_server.db.base import record_id_in_range
from invoice_server.db.unit_of_work import unit_of_work
from invoice_server.models.client import Client
from invoice_server.models.invoice import Invoice
from invoice_server.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from invoice_server.schemas.invoice import InvoiceResponse

router = APIRouter()


def _get_client(db: Session, client_id: int) -> Client:
    client = None
    if record_id_in_range(client_id):
        client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise BusinessError.not_found("Client")
    return client


def _apply(client: Client, data: ClientCreate) -> None:
    client.name = data.name
    client.email = data.email
    client.phone = data.phone
    client.address = data.address
    client.city = data.city
    client.postal_code = data.postal_code
    client.country = data.country
    client.tax_id = data.tax_id
    client.notes = data.notes


@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(
    data: ClientCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    with unit_of_work(db):
        client = Client()
        _apply(client, data)
        db.add(client)
    db.refresh(client)

    AuditLog.log_action("create", "client", client.id, user_id)
    return {"message": "Client created successfully", "client": ClientResponse.model_validate(client)}


@router.get("")
def list_clients(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    clients = db.query(Client).order_by(Client.created_at.desc(), Client.id.desc()).all()
    return {"clients": [ClientResponse.model_validate(c) for c in clients]}


@router.get("/{client_id}")
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return {"client": ClientResponse.model_validate(_get_client(db, client_id))}


@router.put("/{client_id}")
def update_client(
    client_id: int,
    data: ClientUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Full replace: optional fields left out are cleared."""
    with unit_of_work(db):
        client = _get_client(db, client_id)
        _apply(client, data)
    db.refresh(client)

    AuditLog.log_action("update", "client", client_id, user_id)
    return {"message": "Client updated successfully", "client": ClientResponse.model_validate(client)}


@router.delete("/{client_id}")
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Refused with 409 while any invoice references the client."""
    with unit_of_work(db):
        client = _get_client(db, client_id)
        in_use = db.query(Invoice.id).filter(Invoice.client_id == client_id).first()
        if in_use:
            raise BusinessError.dependency_conflict(
                "Cannot delete client",
                "This client has existing invoices. Please delete the invoices first.",
            )
        db.delete(client)

    AuditLog.log_action("delete", "client", client_id, user_id)
    return {"message": "Client deleted successfully"}


@router.get("/{client_id}/invoices")
def list_client_invoices(
    client_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Every invoice billed to this client, newest first."""
    _get_client(db, client_id)
    invoices = (
        db.query(Invoice)
        .options(
            joinedload(Invoice.client),
            joinedload(Invoice.bill_from),
            selectinload(Invoice.items),
        )
        .filter(Invoice.client_id == client_id)
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .all()
    )
    return {"invoices": [InvoiceResponse.model_validate(inv) for inv in invoices]}
