"""
Invoice header row. Items and payment details hang off it and go with it.

invoice_number carries a UNIQUE constraint: that constraint is what actually
guarantees no two invoices share a number. The application-level check in
the creation service only fails fast.

amount_paid is deliberately not bounded by total.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Date, Text, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from invoice_server.db.base import Base

INVOICE_STATUSES = ("pending", "paid", "partially_paid", "overdue")


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("subtotal >= 0", name="ck_invoices_subtotal_non_negative"),
        CheckConstraint("tax_amount >= 0", name="ck_invoices_tax_amount_non_negative"),
        CheckConstraint("total >= 0", name="ck_invoices_total_non_negative"),
        CheckConstraint("amount_paid >= 0", name="ck_invoices_amount_paid_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # No cascade: client deletes are blocked while invoices exist
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    invoice_number = Column(String(100), unique=True, nullable=False, index=True)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    bill_from_id = Column(Integer, ForeignKey("bill_from_addresses.id"), nullable=True)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    status = Column(String(32), nullable=False, default="pending")  # pending | paid | partially_paid | overdue
    amount_paid = Column(Numeric(10, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", backref="invoices")
    client = relationship("Client", backref="invoices")
    bill_from = relationship("BillFromAddress", backref="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InvoiceItem.id",
    )
    payment_details = relationship(
        "PaymentDetail",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
