"""
Integration tests for usage metering through provider callbacks and the
usage query endpoints
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from src.domain.base import utcnow
from tests.utils.billing_api import admin_headers, create_tenant, register_number


def _window():
    now = utcnow()
    return {
        "start": (now - timedelta(days=1)).isoformat(),
        "end": (now + timedelta(days=1)).isoformat(),
    }


async def _balance(client: AsyncClient, tenant_id: str) -> float:
    response = await client.get(f"/tenants/{tenant_id}", headers=admin_headers())
    return response.json()["current_balance"]


@pytest.mark.asyncio
async def test_completed_call_is_charged_once(client: AsyncClient, test_data):
    tenant = await create_tenant(client)
    await register_number(client, tenant["id"])
    callback = test_data.form("call_status_completed")

    first = await client.post("/webhooks/telephony/call-status", data=callback)
    assert first.status_code == 200
    assert first.json()["status"] == "recorded"

    # Provider redelivery of the same callback
    replay = await client.post("/webhooks/telephony/call-status", data=callback)
    assert replay.status_code == 200
    assert replay.json()["status"] == "duplicate"
    assert replay.json()["usage_id"] == first.json()["usage_id"]

    assert await _balance(client, tenant["id"]) == -0.02


@pytest.mark.asyncio
async def test_non_billable_callbacks_are_acknowledged(client: AsyncClient, test_data):
    tenant = await create_tenant(client)
    await register_number(client, tenant["id"])

    ringing = await client.post(
        "/webhooks/telephony/call-status", data=test_data.form("call_status_ringing")
    )
    assert ringing.status_code == 200
    assert ringing.json()["status"] == "ignored"

    unknown = test_data.form("call_status_completed", From="+15559999999")
    response = await client.post("/webhooks/telephony/call-status", data=unknown)
    assert response.json() == {
        "status": "ignored",
        "detail": "unknown phone number",
        "usage_id": None,
        "payment_id": None,
    }

    assert await _balance(client, tenant["id"]) == 0.0


@pytest.mark.asyncio
async def test_callback_missing_fields_is_rejected(client: AsyncClient):
    response = await client.post("/webhooks/telephony/call-status", data={"CallSid": "CA1"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_usage_stats(client: AsyncClient, test_data):
    tenant = await create_tenant(client)
    number = await register_number(client, tenant["id"])

    await client.post(
        "/webhooks/telephony/call-status", data=test_data.form("call_status_completed")
    )
    message = test_data.form("message_status_delivered")
    await client.post("/webhooks/telephony/message-status", data=message)
    mms = test_data.form(
        "message_status_delivered", MessageSid="SM1000000000000000000000000000002", NumMedia=1
    )
    await client.post("/webhooks/telephony/message-status", data=mms)

    response = await client.get(
        "/usage/stats",
        params={"tenant_id": tenant["id"], **_window()},
        headers=admin_headers(),
    )

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["total_calls"] == 1
    assert stats["total_minutes"] == 3
    assert stats["total_sms"] == 1
    assert stats["total_mms"] == 1
    assert stats["total_cost"] == 0.04
    assert stats["by_type"]["outbound_call"]["duration"] == 125
    assert stats["by_type"]["inbound_mms"]["count"] == 1
    assert stats["by_phone_number"][0]["phone_number_id"] == number["id"]

    response = await client.get(
        f"/usage/resource/{number['id']}",
        params={"type": "inbound_sms", **_window()},
        headers=admin_headers(),
    )
    page = response.json()
    assert page["total"] == 1
    assert page["records"][0]["provider_reference_id"] == "SM1000000000000000000000000000001"
    assert page["records"][0]["cost"] == 0.01


@pytest.mark.asyncio
async def test_usage_query_errors(client: AsyncClient):
    tenant = await create_tenant(client)
    window = _window()

    response = await client.get(
        "/usage/stats",
        params={"tenant_id": tenant["id"], "start": window["end"], "end": window["start"]},
        headers=admin_headers(),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_PERIOD"

    response = await client.get(
        "/usage/resource/00000000-0000-0000-0000-000000000000",
        params=window,
        headers=admin_headers(),
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PHONE_NUMBER_NOT_FOUND"


@pytest.mark.asyncio
async def test_low_balance_alert_logged(client: AsyncClient, test_data):
    tenant = await create_tenant(client)
    await register_number(client, tenant["id"])

    await client.post(
        "/webhooks/telephony/call-status", data=test_data.form("call_status_completed")
    )

    response = await client.get(
        f"/tenants/{tenant['id']}/activity", params={"type": "usage_alert"}, headers=admin_headers()
    )
    entries = response.json()["entries"]
    assert len(entries) == 1
    assert entries[0]["metadata"]["alert_type"] == "low_balance"
    assert entries[0]["actor"] == "system"
