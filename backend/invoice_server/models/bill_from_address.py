from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from invoice_server.db.base import Base


class BillFromAddress(Base):
    """Sender profile printed as the invoice issuer. Many per user."""
    __tablename__ = "bill_from_addresses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    company_name = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    city = Column(String(255), nullable=False)
    postal_code = Column(String(20), nullable=False)
    country = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="bill_from_addresses")
