from invoice_server.models.user import User
from invoice_server.models.client import Client
from invoice_server.models.bill_from_address import BillFromAddress
from invoice_server.models.invoice import Invoice
from invoice_server.models.invoice_item import InvoiceItem
from invoice_server.models.payment_detail import PaymentDetail

__all__ = ["User", "Client", "BillFromAddress", "Invoice", "InvoiceItem", "PaymentDetail"]
