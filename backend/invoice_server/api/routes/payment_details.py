"""Payment details. At most one default per user (see payment_detail_service)."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from invoice_server.api.deps import get_db, get_current_user_id
from invoice_server.schemas.payment_detail import (
    PaymentDetailCreate,
    PaymentDetailResponse,
    PaymentDetailUpdate,
)
from invoice_server.services import payment_detail_service

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_payment_detail(
    data: PaymentDetailCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    detail = payment_detail_service.create_payment_detail(db, user_id, data)
    return {
        "message": "Payment details created successfully",
        "paymentDetails": PaymentDetailResponse.model_validate(detail),
    }


@router.get("")
def list_payment_details(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Default first, then newest."""
    details = payment_detail_service.list_payment_details(db, user_id)
    return {"paymentDetails": [PaymentDetailResponse.model_validate(d) for d in details]}


@router.get("/{detail_id}")
def get_payment_detail(
    detail_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    detail = payment_detail_service.get_payment_detail(db, user_id, detail_id)
    return {"paymentDetails": PaymentDetailResponse.model_validate(detail)}


@router.put("/{detail_id}")
def update_payment_detail(
    detail_id: int,
    data: PaymentDetailUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    detail = payment_detail_service.update_payment_detail(db, user_id, detail_id, data)
    return {
        "message": "Payment details updated successfully",
        "paymentDetails": PaymentDetailResponse.model_validate(detail),
    }


@router.delete("/{detail_id}")
def delete_payment_detail(
    detail_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    payment_detail_service.delete_payment_detail(db, user_id, detail_id)
    return {"message": "Payment details deleted successfully"}
