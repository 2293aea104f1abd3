"""
PaymentDetail: bank/payment coordinates a user prints on invoices.

At most one row per user has is_default = True. The payment-detail service
keeps it that way (unset siblings, then write, one transaction); a partial
unique index on user_id WHERE is_default rejects whatever slips past that
between concurrent writers.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, Index, text
from sqlalchemy.orm import backref, relationship
from sqlalchemy.sql import func
from invoice_server.db.base import Base


class PaymentDetail(Base):
    __tablename__ = "payment_details"
    __table_args__ = (
        Index(
            "uq_payment_details_default_per_user",
            "user_id",
            unique=True,
            sqlite_where=text("is_default = 1"),
            postgresql_where=text("is_default"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=True)
    method = Column(String(100), nullable=False)
    account_name = Column(String(255), nullable=False)
    account_number = Column(String(255), nullable=False)
    bank_name = Column(String(255), nullable=False)
    swift_code = Column(String(50), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="payment_details")
    client = relationship("Client", backref=backref("payment_details", passive_deletes=True))
    invoice = relationship("Invoice", back_populates="payment_details")
