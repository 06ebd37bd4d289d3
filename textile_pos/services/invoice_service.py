from datetime import datetime, timezone

from sqlalchemy.orm import Session

from textile_pos.models.sales import InvoiceSequence


def format_invoice_number(prefix: str, year: int, value: int) -> str:
    return "{}-{}-{:05d}".format(prefix, year, value)


def next_invoice_number(db: Session, *, prefix: str = "INV", now: datetime | None = None) -> str:
    """Allocate the next invoice number for ``now``'s year inside the caller's transaction.

    The counter row is locked for update where the backend supports it, and
    ``sales.invoice_no`` carries a unique constraint, so a number can never be
    issued twice even if two writers race.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    year = now.year

    sequence = db.get(InvoiceSequence, year, with_for_update=True)
    if sequence is None:
        sequence = InvoiceSequence(year=year, last_value=0)
        db.add(sequence)
    sequence.last_value = (sequence.last_value or 0) + 1
    db.flush()
    return format_invoice_number(prefix, year, sequence.last_value)


__all__ = ["format_invoice_number", "next_invoice_number"]
