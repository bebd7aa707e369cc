"""
Integration tests for invoice generation and lookup
"""

from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from src.domain.base import utcnow
from src.domain.entities import UsageType
from tests.utils.billing_api import (
    admin_headers,
    create_tenant,
    register_number,
    seed_invoice,
    seed_usage,
)
from tests.utils.json_compare import exclude_keys, pick_keys

PERIOD = {"period_start": "2026-09-01T00:00:00", "period_end": "2026-10-01T00:00:00"}


async def _tenant_with_september_usage(client: AsyncClient, db_session: AsyncSession) -> dict:
    tenant = await create_tenant(client)
    number = await register_number(client, tenant["id"])
    at = datetime(2026, 9, 15, 12, 0)
    await seed_usage(
        db_session, tenant["id"], number["id"], UsageType.outbound_call, "0.02", 50, at, duration=60
    )
    await seed_usage(db_session, tenant["id"], number["id"], UsageType.outbound_sms, "0.01", 10, at)
    # Outside the billing period
    await seed_usage(
        db_session, tenant["id"], number["id"], UsageType.outbound_sms, "5.00", 1, datetime(2026, 10, 1)
    )
    return tenant


@pytest.mark.asyncio
async def test_generate_invoice(client: AsyncClient, db_session: AsyncSession):
    tenant = await _tenant_with_september_usage(client, db_session)

    response = await client.post(
        "/invoices/generate",
        json={"tenant_id": tenant["id"], **PERIOD, "notes": "September"},
        headers=admin_headers(),
    )

    assert response.status_code == 201
    invoice = response.json()
    year = utcnow().year
    assert exclude_keys(
        invoice,
        {"id", "created_at", "line_items", "usage_summary", "billing_period_start",
         "billing_period_end", "due_date"},
    ) == {
        "tenant_id": tenant["id"],
        "invoice_number": f"INV-{year}-0001",
        "status": "pending",
        "subtotal": 2.1,
        "tax_rate": 8.875,
        "tax_amount": 0.19,
        "total_amount": 2.29,
        "paid_amount": 0.0,
        "balance_due": 2.29,
        "external_invoice_id": None,
        "notes": "September",
        "paid_at": None,
    }
    assert invoice["due_date"].startswith("2026-10-31")
    assert pick_keys(invoice["line_items"], {"category", "amount"}) == [
        {"category": "phone_rental", "amount": 1.0},
        {"category": "usage", "amount": 1.1},
    ]
    assert invoice["line_items"][1]["description"] == "Usage charges (50 calls, 10 SMS, 0 MMS)"
    assert invoice["usage_summary"]["total_minutes"] == 50

    response = await client.get(f"/invoices/{invoice['id']}", headers=admin_headers())
    assert response.status_code == 200
    assert response.json()["invoice_number"] == invoice["invoice_number"]

    response = await client.get(
        f"/tenants/{tenant['id']}/activity", params={"type": "invoice_created"}, headers=admin_headers()
    )
    assert response.json()["entries"][0]["metadata"]["invoice_number"] == f"INV-{year}-0001"


@pytest.mark.asyncio
async def test_invoice_numbers_increase(client: AsyncClient, db_session: AsyncSession):
    tenant = await _tenant_with_september_usage(client, db_session)
    numbers = []
    for _ in range(3):
        response = await client.post(
            "/invoices/generate", json={"tenant_id": tenant["id"], **PERIOD}, headers=admin_headers()
        )
        numbers.append(response.json()["invoice_number"])

    year = utcnow().year
    assert numbers == [f"INV-{year}-0001", f"INV-{year}-0002", f"INV-{year}-0003"]


@pytest.mark.asyncio
async def test_tenant_without_usage_pays_rental_only(client: AsyncClient):
    tenant = await create_tenant(client)
    await register_number(client, tenant["id"])

    response = await client.post(
        "/invoices/generate", json={"tenant_id": tenant["id"], **PERIOD}, headers=admin_headers()
    )

    invoice = response.json()
    assert len(invoice["line_items"]) == 1
    assert invoice["subtotal"] == 1.0
    assert invoice["tax_amount"] == 0.09
    assert invoice["total_amount"] == 1.09


@pytest.mark.asyncio
async def test_generate_invoice_errors(client: AsyncClient):
    tenant = await create_tenant(client)

    response = await client.post(
        "/invoices/generate",
        json={
            "tenant_id": tenant["id"],
            "period_start": PERIOD["period_end"],
            "period_end": PERIOD["period_start"],
        },
        headers=admin_headers(),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_BILLING_PERIOD"

    response = await client.post(
        "/invoices/generate",
        json={"tenant_id": "00000000-0000-0000-0000-000000000000", **PERIOD},
        headers=admin_headers(),
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TENANT_NOT_FOUND"

    response = await client.get(
        "/invoices/00000000-0000-0000-0000-000000000000", headers=admin_headers()
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "INVOICE_NOT_FOUND"


@pytest.mark.asyncio
async def test_list_invoices(client: AsyncClient):
    acme = await create_tenant(client)
    globex = await create_tenant(client, key="second_tenant")
    await register_number(client, acme["id"])
    await register_number(client, globex["id"], number="+15550100002", provider_sid="PN0002")
    for tenant in (acme, acme, globex):
        await client.post(
            "/invoices/generate", json={"tenant_id": tenant["id"], **PERIOD}, headers=admin_headers()
        )

    response = await client.get(
        "/invoices", params={"tenant_id": acme["id"], "limit": 1}, headers=admin_headers()
    )
    page = response.json()
    assert page["total"] == 2
    assert len(page["invoices"]) == 1
    assert page["invoices"][0]["tenant_id"] == acme["id"]

    response = await client.get("/invoices", params={"status": "paid"}, headers=admin_headers())
    assert response.json()["total"] == 0

    response = await client.get("/invoices", params={"status": "pending"}, headers=admin_headers())
    assert response.json()["total"] == 3


@pytest.mark.asyncio
async def test_zero_total_invoice_is_settled(client: AsyncClient):
    tenant = await create_tenant(client)

    response = await client.post(
        "/invoices/generate", json={"tenant_id": tenant["id"], **PERIOD}, headers=admin_headers()
    )

    assert response.status_code == 201
    invoice = response.json()
    assert invoice["line_items"] == []
    assert invoice["total_amount"] == 0.0
    assert invoice["status"] == "paid"
    assert invoice["balance_due"] == 0.0
    assert invoice["paid_at"] is not None


@pytest.mark.asyncio
async def test_generate_when_period_already_invoiced(client: AsyncClient, db_session: AsyncSession):
    tenant = await _tenant_with_september_usage(client, db_session)
    body = {"tenant_id": tenant["id"], **PERIOD, "skip_if_invoiced": True}

    first = await client.post("/invoices/generate", json=body, headers=admin_headers())
    assert first.status_code == 201

    second = await client.post("/invoices/generate", json=body, headers=admin_headers())
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "INVOICE_EXISTS"

    # The rejected attempt does not consume an invoice number
    third = await client.post(
        "/invoices/generate", json={"tenant_id": tenant["id"], **PERIOD}, headers=admin_headers()
    )
    assert third.json()["invoice_number"] == f"INV-{utcnow().year}-0002"


@pytest.mark.asyncio
async def test_list_invoices_end_is_exclusive(client: AsyncClient, db_session: AsyncSession):
    tenant = await create_tenant(client)
    await seed_invoice(
        db_session,
        tenant["id"],
        "INV-SEED-0401",
        "25.00",
        datetime(2026, 10, 1),
        created_at=datetime(2026, 9, 1),
    )
    september = {"tenant_id": tenant["id"], "start": "2026-08-01T00:00:00"}

    response = await client.get(
        "/invoices", params={**september, "end": "2026-09-01T00:00:00"}, headers=admin_headers()
    )
    assert response.json()["total"] == 0

    response = await client.get(
        "/invoices", params={**september, "end": "2026-09-01T00:00:01"}, headers=admin_headers()
    )
    assert response.json()["total"] == 1

    # The same instant as a start bound is included
    response = await client.get(
        "/invoices",
        params={"tenant_id": tenant["id"], "start": "2026-09-01T00:00:00"},
        headers=admin_headers(),
    )
    assert response.json()["total"] == 1
