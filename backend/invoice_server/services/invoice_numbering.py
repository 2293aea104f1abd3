"""Human-readable invoice numbers: INV-YYYY-MM-NNNN, sequential per month.

The sequence is read as "greatest existing number with this month's
prefix, plus one". The suffix is fixed-width zero-padded, so ordering the
strings descending is ordering the numbers descending (up to 9999 a month).

Generation never blocks invoice creation: on any failure it falls back to
INV-<epoch millis>. That number is unique in practice but breaks the
monthly sequence; the UNIQUE constraint on invoices.invoice_number stays
the final arbiter either way.
"""
import logging
from contextlib import nullcontext
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from invoice_server.models.invoice import Invoice

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV"
SEQUENCE_WIDTH = 4


def month_prefix(moment: datetime) -> str:
    """INV-2025-01- for any moment in January 2025."""
    return f"{INVOICE_PREFIX}-{moment.year}-{moment.month:02d}-"


def next_sequence(last_number: Optional[str]) -> int:
    """Sequence value following `last_number`; 1 when there is none.

    Raises ValueError when the trailing segment is not an integer.
    """
    if not last_number:
        return 1
    return int(last_number.split("-")[-1]) + 1


def format_invoice_number(prefix: str, sequence: int) -> str:
    return f"{prefix}{sequence:0{SEQUENCE_WIDTH}d}"


def fallback_invoice_number(moment: datetime) -> str:
    return f"{INVOICE_PREFIX}-{int(moment.timestamp() * 1000)}"


def find_last_invoice_number(db: Session, prefix: str) -> Optional[str]:
    return (
        db.query(Invoice.invoice_number)
        .filter(Invoice.invoice_number.like(f"{prefix}%"))
        .order_by(Invoice.invoice_number.desc())
        .limit(1)
        .scalar()
    )


def _savepoint(db: Session):
    # A failed statement aborts the whole transaction on PostgreSQL, so the
    # lookup runs inside a SAVEPOINT there. SQLite keeps the transaction usable
    # after an error.
    if db.get_bind().dialect.name == "sqlite":
        return nullcontext()
    return db.begin_nested()


def generate_invoice_number(db: Session, moment: datetime) -> str:
    """Next number in `moment`'s month, or the timestamp fallback.

    Must run inside the same transaction as the invoice insert.
    """
    prefix = month_prefix(moment)
    try:
        with _savepoint(db):
            last_number = find_last_invoice_number(db, prefix)
        number = format_invoice_number(prefix, next_sequence(last_number))
    except Exception as exc:
        number = fallback_invoice_number(moment)
        logger.warning(
            f"Invoice number generation failed for prefix {prefix} "
            f"({type(exc).__name__}: {exc}); using fallback {number}"
        )
        return number

    logger.debug(f"Generated invoice number {number} (last was {last_number or 'none'})")
    return number
