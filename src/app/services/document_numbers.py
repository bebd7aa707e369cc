"""Year-scoped document numbers such as INV-2026-0001"""

from datetime import datetime

from src.app.services.unit_of_work import UnitOfWork

INVOICE_PREFIX = "INV"
PAYMENT_PREFIX = "PAY"


def format_document_number(prefix: str, year: int, sequence: int) -> str:
    return f"{prefix}-{year}-{sequence:04d}"


async def next_document_number(uow: UnitOfWork, prefix: str, now: datetime) -> str:
    """Allocate the next number from the per-year counter (inside the caller's transaction)"""
    sequence = await uow.sequences.next_value(f"{prefix.lower()}:{now.year}")
    return format_document_number(prefix, now.year, sequence)
