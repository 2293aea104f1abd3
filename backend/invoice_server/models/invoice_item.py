from sqlalchemy import Column, Integer, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship
from invoice_server.db.base import Base


class InvoiceItem(Base):
    """One billed line. total is stored as sent by the caller, not recomputed."""
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items")
