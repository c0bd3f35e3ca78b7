import asyncio
from datetime import date

import pytest

from conftest import create_property, create_unit, place_tenant, signup
from rentline_backend.modules.auth.schemas import AuthenticatedUser
from rentline_backend.modules.property_management import crud as property_crud
from rentline_backend.modules.tenancy_management import crud as tenancy_crud
from rentline_backend.modules.tenancy_management import services
from rentline_backend.modules.tenancy_management.models import (
    JoinRequest,
    Tenancy,
    TenancyStatus,
)
from rentline_backend.modules.tenancy_management.schemas import ApproveJoinRequest
from rentline_backend.modules.tenancy_management.services import lease_summary


async def published_unit(client, headers, rent=1000, unit_number="A1"):
    prop = await create_property(client, headers, is_searchable=True)
    unit = await create_unit(client, headers, prop["id"], unit_number, rent)
    return prop, unit


async def submit(client, headers, property_id, unit_id=None, message=None):
    return await client.post(
        "/api/join-requests",
        json={"property_id": property_id, "unit_id": unit_id, "message": message},
        headers=headers,
    )


def landlord_actor(landlord_id):
    return AuthenticatedUser(
        id=landlord_id, email="landlord@example.com", role_slug="landlord"
    )


@pytest.mark.asyncio
async def test_join_request_approval_creates_tenancy(client, landlord, tenant):
    _, landlord_headers = landlord
    tenant_id, tenant_headers = tenant
    prop, unit = await published_unit(client, landlord_headers)

    response = await submit(client, tenant_headers, prop["id"], unit["id"], " Hi! ")
    assert response.status_code == 201
    request = response.json()["data"]
    assert request["status"] == "pending"
    assert request["message"] == "Hi!"
    assert request["property"]["name"] == "Palm Court"

    response = await client.get("/api/join-requests/pending", headers=landlord_headers)
    assert response.json()["data"]["total"] == 1

    response = await client.post(
        f"/api/join-requests/{request['id']}/approve", headers=landlord_headers
    )
    assert response.status_code == 200, response.text
    approved = response.json()["data"]
    assert approved["status"] == "approved"
    assert approved["tenancy_id"] is not None

    response = await client.get(
        f"/api/tenancies/{approved['tenancy_id']}", headers=tenant_headers
    )
    tenancy = response.json()["data"]
    assert tenancy["tenant_id"] == tenant_id
    assert tenancy["rent_amount"] == 1000
    assert tenancy["status"] == "active"
    assert tenancy["unit"]["property"]["id"] == prop["id"]

    response = await client.get(f"/api/units/{unit['id']}", headers=landlord_headers)
    assert response.json()["data"]["status"] == "occupied"

    response = await client.get("/api/join-requests/pending", headers=landlord_headers)
    assert response.json()["data"]["total"] == 0


@pytest.mark.asyncio
async def test_request_without_unit_needs_unit_on_approval(client, landlord, tenant):
    _, landlord_headers = landlord
    prop, unit = await published_unit(client, landlord_headers)

    response = await submit(client, tenant[1], prop["id"])
    request = response.json()["data"]
    assert request["unit_id"] is None

    response = await client.post(
        f"/api/join-requests/{request['id']}/approve", headers=landlord_headers
    )
    assert response.status_code == 400

    response = await client.post(
        f"/api/join-requests/{request['id']}/approve",
        json={"unit_id": unit["id"], "rent_amount": 950, "start_date": "2026-02-01"},
        headers=landlord_headers,
    )
    assert response.status_code == 200
    approved = response.json()["data"]
    assert approved["unit_id"] == unit["id"]

    response = await client.get(
        f"/api/tenancies/{approved['tenancy_id']}", headers=landlord_headers
    )
    tenancy = response.json()["data"]
    assert tenancy["rent_amount"] == 950
    assert tenancy["start_date"] == "2026-02-01"


@pytest.mark.asyncio
async def test_approval_cannot_switch_named_unit(client, landlord, tenant):
    _, landlord_headers = landlord
    prop, unit = await published_unit(client, landlord_headers)
    other = await create_unit(client, landlord_headers, prop["id"], "B1")

    request = (await submit(client, tenant[1], prop["id"], unit["id"])).json()["data"]
    response = await client.post(
        f"/api/join-requests/{request['id']}/approve",
        json={"unit_id": other["id"]},
        headers=landlord_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_submit_rules(client, landlord, tenant):
    _, landlord_headers = landlord
    _, tenant_headers = tenant

    hidden = await create_property(client, landlord_headers, "Hidden")
    await create_unit(client, landlord_headers, hidden["id"])
    response = await submit(client, tenant_headers, hidden["id"])
    assert response.status_code == 404

    empty = await create_property(client, landlord_headers, "Empty", is_searchable=True)
    response = await submit(client, tenant_headers, empty["id"])
    assert response.status_code == 409

    prop, unit = await published_unit(client, landlord_headers)
    other_prop, other_unit = await published_unit(client, landlord_headers)
    response = await submit(client, tenant_headers, prop["id"], other_unit["id"])
    assert response.status_code == 400

    assert (await submit(client, tenant_headers, prop["id"], unit["id"])).status_code == 201
    response = await submit(client, tenant_headers, prop["id"], unit["id"])
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_only_tenants_submit_requests(client, landlord):
    _, landlord_headers = landlord
    prop, _ = await published_unit(client, landlord_headers)
    response = await submit(client, landlord_headers, prop["id"])
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_reject_and_cancel(client, landlord, tenant):
    _, landlord_headers = landlord
    _, tenant_headers = tenant
    prop, unit = await published_unit(client, landlord_headers)

    first = (await submit(client, tenant_headers, prop["id"], unit["id"])).json()["data"]
    response = await client.post(
        f"/api/join-requests/{first['id']}/reject",
        json={"reason": "   "},
        headers=landlord_headers,
    )
    assert response.status_code == 200
    rejected = response.json()["data"]
    assert rejected["status"] == "rejected"
    assert rejected["rejection_reason"] is None

    # A decided request cannot change again
    response = await client.post(
        f"/api/join-requests/{first['id']}/approve", headers=landlord_headers
    )
    assert response.status_code == 409

    second = (await submit(client, tenant_headers, prop["id"], unit["id"])).json()["data"]
    response = await client.post(
        f"/api/join-requests/{second['id']}/cancel", headers=tenant_headers
    )
    assert response.json()["data"]["status"] == "cancelled"

    response = await client.get("/api/join-requests/mine", headers=tenant_headers)
    statuses = [r["status"] for r in response.json()["data"]["items"]]
    assert sorted(statuses) == ["cancelled", "rejected"]


@pytest.mark.asyncio
async def test_other_landlord_cannot_approve(client, landlord, tenant):
    _, landlord_headers = landlord
    _, intruder_headers = await signup(client, "intruder@example.com", "landlord")
    prop, unit = await published_unit(client, landlord_headers)
    request = (await submit(client, tenant[1], prop["id"], unit["id"])).json()["data"]

    response = await client.post(
        f"/api/join-requests/{request['id']}/approve", headers=intruder_headers
    )
    assert response.status_code == 403

    response = await client.get("/api/join-requests/pending", headers=intruder_headers)
    assert response.json()["data"]["total"] == 0


@pytest.mark.asyncio
async def test_second_approval_for_same_unit_fails(client, landlord, tenant):
    _, landlord_headers = landlord
    _, other_tenant_headers = await signup(client, "second@example.com")
    prop, unit = await published_unit(client, landlord_headers)

    first = (await submit(client, tenant[1], prop["id"], unit["id"])).json()["data"]
    second = (
        await submit(client, other_tenant_headers, prop["id"], unit["id"])
    ).json()["data"]

    response = await client.post(
        f"/api/join-requests/{first['id']}/approve", headers=landlord_headers
    )
    assert response.status_code == 200

    response = await client.post(
        f"/api/join-requests/{second['id']}/approve", headers=landlord_headers
    )
    assert response.status_code == 409

    response = await client.get("/api/tenancies", headers=landlord_headers)
    assert response.json()["data"]["total"] == 1


@pytest.mark.asyncio
async def test_failed_approval_is_rolled_back(
    client, landlord, tenant, session_factory, monkeypatch
):
    landlord_id, landlord_headers = landlord
    prop, unit = await published_unit(client, landlord_headers)
    request = (await submit(client, tenant[1], prop["id"], unit["id"])).json()["data"]

    async def connection_lost(*args, **kwargs):
        raise RuntimeError("connection lost")

    # The tenancy row and the unit claim are flushed before this step fails
    monkeypatch.setattr(tenancy_crud, "approve_pending_request", connection_lost)
    async with session_factory() as db:
        with pytest.raises(RuntimeError):
            await services.approve_join_request(
                db, landlord_actor(landlord_id), request["id"], ApproveJoinRequest()
            )
    monkeypatch.undo()

    response = await client.get("/api/tenancies", headers=landlord_headers)
    assert response.json()["data"]["total"] == 0
    response = await client.get(f"/api/units/{unit['id']}", headers=landlord_headers)
    assert response.json()["data"]["status"] == "vacant"
    response = await client.get("/api/join-requests/pending", headers=landlord_headers)
    pending = response.json()["data"]["items"]
    assert [(r["id"], r["status"], r["tenancy_id"]) for r in pending] == [
        (request["id"], "pending", None)
    ]

    # The request can still be approved afterwards
    response = await client.post(
        f"/api/join-requests/{request['id']}/approve", headers=landlord_headers
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_concurrent_approvals_fill_unit_once(
    file_client, file_session_factory
):
    landlord_id, landlord_headers = await signup(
        file_client, "lord@example.com", "landlord"
    )
    prop, unit = await published_unit(file_client, landlord_headers)
    request_ids = []
    for email in ("first@example.com", "second@example.com"):
        _, headers = await signup(file_client, email)
        response = await submit(file_client, headers, prop["id"], unit["id"])
        assert response.status_code == 201
        request_ids.append(response.json()["data"]["id"])

    async def approve(request_id):
        async with file_session_factory() as db:
            return await services.approve_join_request(
                db, landlord_actor(landlord_id), request_id, ApproveJoinRequest()
            )

    results = await asyncio.gather(
        *(approve(request_id) for request_id in request_ids), return_exceptions=True
    )
    assert sum(isinstance(result, JoinRequest) for result in results) == 1

    async with file_session_factory() as db:
        assert await property_crud.count_active_tenancies(db, unit_id=unit["id"]) == 1
    response = await file_client.get(f"/api/units/{unit['id']}", headers=landlord_headers)
    assert response.json()["data"]["status"] == "occupied"


@pytest.mark.asyncio
async def test_add_tenant_directly(client, landlord, tenant):
    _, landlord_headers = landlord
    prop, unit = await published_unit(client, landlord_headers)

    response = await client.post(
        "/api/tenancies",
        json={
            "email": "nobody@example.com",
            "unit_id": unit["id"],
            "rent_amount": 1000,
            "start_date": "2026-01-01",
        },
        headers=landlord_headers,
    )
    assert response.status_code == 404

    await signup(client, "lord2@example.com", "landlord")
    response = await client.post(
        "/api/tenancies",
        json={
            "email": "lord2@example.com",
            "unit_id": unit["id"],
            "rent_amount": 1000,
            "start_date": "2026-01-01",
        },
        headers=landlord_headers,
    )
    assert response.status_code == 400

    response = await client.post(
        "/api/tenancies",
        json={
            "email": "tenant@example.com",
            "unit_id": unit["id"],
            "rent_amount": 1000,
            "start_date": "2026-03-01",
            "end_date": "2026-02-01",
        },
        headers=landlord_headers,
    )
    assert response.status_code in (400, 422)

    tenancy = await place_tenant(client, landlord_headers, unit["id"])
    assert tenancy["unit"]["unit_number"] == "A1"
    assert tenancy["tenant"]["email"] == "tenant@example.com"


@pytest.mark.asyncio
async def test_end_tenancy_frees_unit(client, landlord, tenant):
    _, landlord_headers = landlord
    prop, unit = await published_unit(client, landlord_headers)
    tenancy = await place_tenant(client, landlord_headers, unit["id"])

    response = await client.post(
        f"/api/tenancies/{tenancy['id']}/end", headers=tenant[1]
    )
    assert response.status_code == 403

    response = await client.post(
        f"/api/tenancies/{tenancy['id']}/end",
        json={"end_date": "2026-06-30"},
        headers=landlord_headers,
    )
    assert response.status_code == 200
    ended = response.json()["data"]
    assert ended["status"] == "ended"
    assert ended["end_date"] == "2026-06-30"

    response = await client.get(f"/api/units/{unit['id']}", headers=landlord_headers)
    assert response.json()["data"]["status"] == "vacant"

    response = await client.post(
        f"/api/tenancies/{tenancy['id']}/end", headers=landlord_headers
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_tenancies_are_scoped_to_parties(client, landlord, tenant):
    _, landlord_headers = landlord
    _, stranger_headers = await signup(client, "stranger@example.com")
    _, unit = await published_unit(client, landlord_headers)
    tenancy = await place_tenant(client, landlord_headers, unit["id"])

    response = await client.get(f"/api/tenancies/{tenancy['id']}", headers=stranger_headers)
    assert response.status_code == 403

    response = await client.get("/api/tenancies", headers=stranger_headers)
    assert response.json()["data"]["total"] == 0

    response = await client.get("/api/tenancies", headers=tenant[1])
    assert response.json()["data"]["total"] == 1


@pytest.mark.asyncio
async def test_lease_summary_endpoint(client, landlord, tenant):
    _, landlord_headers = landlord
    _, unit = await published_unit(client, landlord_headers)
    tenancy = await place_tenant(
        client, landlord_headers, unit["id"], start_date="2026-01-15", end_date="2027-01-14"
    )

    response = await client.get(
        f"/api/tenancies/{tenancy['id']}/lease-summary", headers=tenant[1]
    )
    assert response.status_code == 200
    summary = response.json()["data"]
    assert summary["duration_months"] == 12
    assert summary["is_active"] is True


def test_lease_summary_calculation():
    tenancy = Tenancy(
        id=7,
        start_date=date(2026, 1, 31),
        end_date=date(2026, 4, 1),
        status=TenancyStatus.ACTIVE,
    )
    summary = lease_summary(tenancy, as_of=date(2026, 3, 22))
    assert summary.duration_months == 3
    assert summary.days_remaining == 10

    past = lease_summary(tenancy, as_of=date(2026, 5, 1))
    assert past.days_remaining == 0


def test_lease_summary_open_ended():
    tenancy = Tenancy(
        id=8, start_date=date(2026, 1, 1), end_date=None, status=TenancyStatus.ACTIVE
    )
    summary = lease_summary(tenancy, as_of=date(2026, 3, 1))
    assert summary.duration_months is None
    assert summary.days_remaining is None
