import asyncio

import pytest

from conftest import create_property, create_unit, place_tenant, signup
from rentline_backend.core.utils import today
from rentline_backend.modules.auth.schemas import AuthenticatedUser
from rentline_backend.modules.payments import services
from rentline_backend.modules.payments.models import PayoutRequest
from rentline_backend.modules.payments.schemas import PayoutCreate


async def leased_unit(client, landlord_headers, rent=1000):
    prop = await create_property(client, landlord_headers)
    unit = await create_unit(client, landlord_headers, prop["id"], "A1", rent)
    return await place_tenant(client, landlord_headers, unit["id"], rent_amount=rent)


async def pay(client, headers, tenancy_id, amount, method="momo"):
    response = await client.post(
        "/api/payments",
        json={"tenancy_id": tenancy_id, "amount": amount, "method": method},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def settle(client, headers, payment_id, status="completed"):
    return await client.put(
        f"/api/payments/{payment_id}/status", json={"status": status}, headers=headers
    )


@pytest.mark.asyncio
async def test_tenant_pays_rent(client, landlord, tenant):
    _, landlord_headers = landlord
    tenancy = await leased_unit(client, landlord_headers)

    payment = await pay(client, tenant[1], tenancy["id"], 400, "card")
    assert payment["status"] == "pending"
    assert payment["method"] == "card"
    assert payment["payment_date"] == today().isoformat()

    response = await settle(client, landlord_headers, payment["id"])
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "completed"

    # Settled payments are final
    response = await settle(client, landlord_headers, payment["id"], "failed")
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_payment_status_cannot_go_back_to_pending(client, landlord, tenant):
    _, landlord_headers = landlord
    tenancy = await leased_unit(client, landlord_headers)
    payment = await pay(client, tenant[1], tenancy["id"], 100)

    response = await settle(client, landlord_headers, payment["id"], "pending")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_payment_rules(client, landlord, tenant):
    _, landlord_headers = landlord
    tenancy = await leased_unit(client, landlord_headers)
    _, stranger_headers = await signup(client, "stranger@example.com")

    response = await client.post(
        "/api/payments",
        json={"tenancy_id": tenancy["id"], "amount": 10, "method": "cash"},
        headers=stranger_headers,
    )
    assert response.status_code == 403

    response = await client.post(
        "/api/payments",
        json={"tenancy_id": tenancy["id"], "amount": 0, "method": "cash"},
        headers=tenant[1],
    )
    assert response.status_code == 422

    response = await client.post(
        "/api/payments",
        json={"tenancy_id": tenancy["id"], "amount": 10, "method": "cash"},
        headers=landlord_headers,
    )
    assert response.status_code == 403

    await client.post(f"/api/tenancies/{tenancy['id']}/end", headers=landlord_headers)
    response = await client.post(
        "/api/payments",
        json={"tenancy_id": tenancy["id"], "amount": 10, "method": "cash"},
        headers=tenant[1],
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_payment_listing_is_scoped(client, landlord, tenant):
    _, landlord_headers = landlord
    tenancy = await leased_unit(client, landlord_headers)
    await pay(client, tenant[1], tenancy["id"], 100)
    _, other_landlord_headers = await signup(client, "other@example.com", "landlord")

    response = await client.get("/api/payments", headers=tenant[1])
    assert response.json()["data"]["total"] == 1
    response = await client.get("/api/payments", headers=landlord_headers)
    assert response.json()["data"]["total"] == 1
    response = await client.get("/api/payments", headers=other_landlord_headers)
    assert response.json()["data"]["total"] == 0


@pytest.mark.asyncio
async def test_rent_collection_report(client, landlord, tenant):
    _, landlord_headers = landlord
    tenancy = await leased_unit(client, landlord_headers, rent=1000)
    completed = await pay(client, tenant[1], tenancy["id"], 400)
    failed = await pay(client, tenant[1], tenancy["id"], 100)
    await pay(client, tenant[1], tenancy["id"], 50)
    await settle(client, landlord_headers, completed["id"])
    await settle(client, landlord_headers, failed["id"], "failed")

    month = today().strftime("%Y-%m")
    response = await client.get(
        "/api/payments/rent-collection", params={"month": month}, headers=landlord_headers
    )
    assert response.status_code == 200
    report = response.json()["data"]
    assert report["month"] == month
    assert report["total_expected"] == 1000
    assert report["total_collected"] == 400
    assert report["total_outstanding"] == 600
    assert report["collection_rate"] == 40.0

    row = report["tenancies"][0]
    assert row["tenant"]["email"] == "tenant@example.com"
    assert row["unit_number"] == "A1"
    assert row["amount_due"] == 600
    assert len(row["payments"]) == 3
    assert row["days_overdue"] == (today() - today().replace(day=1)).days


@pytest.mark.asyncio
async def test_rent_collection_without_payments(client, landlord, tenant):
    _, landlord_headers = landlord
    await leased_unit(client, landlord_headers, rent=800)

    response = await client.get(
        "/api/payments/rent-collection", params={"month": "2030-01"}, headers=landlord_headers
    )
    report = response.json()["data"]
    assert report["total_collected"] == 0
    assert report["total_outstanding"] == 800
    assert report["collection_rate"] == 0.0
    assert report["tenancies"][0]["days_overdue"] == 0


@pytest.mark.asyncio
async def test_rent_collection_rejects_bad_month(client, landlord):
    response = await client.get(
        "/api/payments/rent-collection", params={"month": "2026/13"}, headers=landlord[1]
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_payouts_follow_balance(client, landlord, tenant, admin):
    _, landlord_headers = landlord
    _, admin_headers = admin
    tenancy = await leased_unit(client, landlord_headers)
    payment = await pay(client, tenant[1], tenancy["id"], 400)
    await settle(client, landlord_headers, payment["id"])

    response = await client.get("/api/payouts/balance", headers=landlord_headers)
    assert response.json()["data"] == {
        "total_collected": 400,
        "total_paid_out": 0,
        "available_balance": 400,
    }

    response = await client.post(
        "/api/payouts",
        json={"amount": 500, "phone_number": "0244000000"},
        headers=landlord_headers,
    )
    assert response.status_code == 409

    response = await client.post(
        "/api/payouts",
        json={"amount": 300, "phone_number": "0244000000"},
        headers=landlord_headers,
    )
    assert response.status_code == 201
    payout = response.json()["data"]
    assert payout["status"] == "pending"

    response = await client.get("/api/payouts/balance", headers=landlord_headers)
    assert response.json()["data"]["available_balance"] == 100

    # Only admins process payouts
    response = await client.put(
        f"/api/payouts/{payout['id']}/status",
        json={"status": "processing"},
        headers=landlord_headers,
    )
    assert response.status_code == 403

    response = await client.put(
        f"/api/payouts/{payout['id']}/status",
        json={"status": "processing"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["processed_at"] is None

    response = await client.put(
        f"/api/payouts/{payout['id']}/status",
        json={"status": "failed", "transaction_id": "TX-1"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["processed_at"] is not None
    assert data["transaction_id"] == "TX-1"

    response = await client.put(
        f"/api/payouts/{payout['id']}/status",
        json={"status": "completed"},
        headers=admin_headers,
    )
    assert response.status_code == 409

    # A failed payout no longer holds the money
    response = await client.get("/api/payouts/balance", headers=landlord_headers)
    assert response.json()["data"]["available_balance"] == 400

    response = await client.get("/api/payouts", headers=admin_headers)
    assert response.json()["data"]["total"] == 1


@pytest.mark.asyncio
async def test_concurrent_payouts_cannot_overdraw(
    file_client, file_session_factory
):
    landlord_id, landlord_headers = await signup(
        file_client, "lord@example.com", "landlord"
    )
    _, tenant_headers = await signup(file_client, "tenant@example.com")
    tenancy = await leased_unit(file_client, landlord_headers)
    payment = await pay(file_client, tenant_headers, tenancy["id"], 1000)
    response = await settle(file_client, landlord_headers, payment["id"])
    assert response.status_code == 200

    actor = AuthenticatedUser(
        id=landlord_id, email="lord@example.com", role_slug="landlord"
    )

    async def withdraw():
        async with file_session_factory() as db:
            return await services.request_payout(
                db, actor, PayoutCreate(amount=1000, phone_number="0244000000")
            )

    results = await asyncio.gather(withdraw(), withdraw(), return_exceptions=True)
    assert sum(isinstance(result, PayoutRequest) for result in results) == 1

    response = await file_client.get("/api/payouts/balance", headers=landlord_headers)
    assert response.json()["data"]["available_balance"] == 0
