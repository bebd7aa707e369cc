"""
Unit tests for invoice line items and totals
"""

from decimal import Decimal

from src.app.services.invoice_calculator import (
    build_line_items,
    compute_totals,
    serialize_line_items,
    usage_snapshot,
)
from src.app.services.usage_aggregator import UsageStats
from src.domain.entities import InvoiceLineItem, LineItemCategory


def _usage(cost, calls=0, sms=0, mms=0):
    return UsageStats(total_calls=calls, total_sms=sms, total_mms=mms, total_cost=Decimal(cost))


def test_one_number_plus_usage_with_tax(phone_number):
    # 50 calls at $0.02 and 10 SMS at $0.01 on one $1.00 number
    items = build_line_items([phone_number], _usage("1.10", calls=50, sms=10))
    totals = compute_totals(items, Decimal("8.875"))

    assert [item.category for item in items] == [
        LineItemCategory.phone_rental,
        LineItemCategory.usage,
    ]
    assert items[0].description == "Phone number rental: +15550100001"
    assert items[0].amount == Decimal("1.00")
    assert items[1].description == "Usage charges (50 calls, 10 SMS, 0 MMS)"
    assert items[1].amount == Decimal("1.10")

    assert totals.subtotal == Decimal("2.10")
    assert totals.tax_amount == Decimal("0.19")
    assert totals.total_amount == Decimal("2.29")


def test_no_usage_line_when_usage_is_free(phone_number):
    items = build_line_items([phone_number], _usage("0"))

    assert len(items) == 1
    assert items[0].category == LineItemCategory.phone_rental


def test_usage_cost_is_rounded_to_cents():
    items = build_line_items([], _usage("0.0049"))
    assert items == []

    items = build_line_items([], _usage("0.005"))
    assert items[0].amount == Decimal("0.01")


def test_totals_of_empty_invoice_are_zero():
    totals = compute_totals([], Decimal("8.875"))

    assert totals.subtotal == Decimal("0")
    assert totals.tax_amount == Decimal("0.00")
    assert totals.total_amount == Decimal("0.00")


def test_tax_rounds_half_up():
    item = InvoiceLineItem(
        description="Usage charges",
        unit_price=Decimal("1.00"),
        amount=Decimal("1.00"),
        category=LineItemCategory.usage,
    )

    # 1.00 * 12.5% = 0.125
    assert compute_totals([item], Decimal("12.5")).tax_amount == Decimal("0.13")


def test_serialized_amounts_are_exact_strings(phone_number):
    stored = serialize_line_items(build_line_items([phone_number], _usage("1.10", calls=50)))

    assert stored[0]["amount"] == "1.00"
    assert stored[1]["unit_price"] == "1.10"
    assert stored[1]["category"] == "usage"
    assert InvoiceLineItem(**stored[1]).amount == Decimal("1.10")


def test_usage_snapshot_is_json_safe():
    snapshot = usage_snapshot(_usage("1.10", calls=50, sms=10))

    assert snapshot["total_cost"] == "1.10"
    assert snapshot["total_calls"] == 50
    assert snapshot["by_phone_number"] == []
