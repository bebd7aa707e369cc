"""
Invoice arithmetic.

Line amounts are rounded to cents before summing so the printed lines
always add up to the subtotal.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List

from src.app.services.usage_aggregator import UsageStats
from src.domain.entities import InvoiceLineItem, LineItemCategory, PhoneNumber
from src.domain.money import ZERO, to_cents, to_decimal


@dataclass
class InvoiceTotals:
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def build_line_items(phone_numbers: Iterable[PhoneNumber], stats: UsageStats) -> List[InvoiceLineItem]:
    items = []
    for phone_number in phone_numbers:
        fee = to_cents(phone_number.monthly_fee)
        items.append(
            InvoiceLineItem(
                description=f"Phone number rental: {phone_number.number}",
                quantity=1,
                unit_price=fee,
                amount=fee,
                category=LineItemCategory.phone_rental,
            )
        )

    usage_cost = to_cents(stats.total_cost)
    if usage_cost > ZERO:
        items.append(
            InvoiceLineItem(
                description=(
                    f"Usage charges ({stats.total_calls} calls, "
                    f"{stats.total_sms} SMS, {stats.total_mms} MMS)"
                ),
                quantity=1,
                unit_price=usage_cost,
                amount=usage_cost,
                category=LineItemCategory.usage,
            )
        )
    return items


def compute_totals(items: Iterable[InvoiceLineItem], tax_rate: Decimal) -> InvoiceTotals:
    """tax_rate is a percentage, e.g. 8.875"""
    rate = to_decimal(tax_rate)
    subtotal = sum((to_cents(item.amount) for item in items), ZERO)
    tax_amount = to_cents(subtotal * rate / Decimal(100))
    return InvoiceTotals(
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        total_amount=subtotal + tax_amount,
    )


def usage_snapshot(stats: UsageStats) -> dict:
    """JSON-safe copy of the usage stats stored on the invoice"""
    return {
        "total_calls": stats.total_calls,
        "total_minutes": stats.total_minutes,
        "total_sms": stats.total_sms,
        "total_mms": stats.total_mms,
        "total_cost": str(stats.total_cost),
        "by_phone_number": [
            {**entry.model_dump(exclude={"cost"}), "cost": str(entry.cost)}
            for entry in stats.by_phone_number
        ],
    }


def serialize_line_items(items: Iterable[InvoiceLineItem]) -> List[dict]:
    """Amounts are stored as strings to keep them exact in the JSON column"""
    return [
        {
            **item.model_dump(mode="json"),
            "unit_price": str(item.unit_price),
            "amount": str(item.amount),
        }
        for item in items
    ]
