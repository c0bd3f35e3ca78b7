import pytest

from conftest import create_property, create_unit, place_tenant


async def portfolio(client, landlord_headers):
    """Two properties, three units, one of them let."""
    first = await create_property(client, landlord_headers, "First", is_searchable=True)
    second = await create_property(client, landlord_headers, "Second")
    let_unit = await create_unit(client, landlord_headers, first["id"], "A1", 1000)
    await create_unit(client, landlord_headers, first["id"], "A2", 700)
    await create_unit(client, landlord_headers, second["id"], "B1", 500)
    tenancy = await place_tenant(client, landlord_headers, let_unit["id"], rent_amount=1000)
    return tenancy, let_unit


@pytest.mark.asyncio
async def test_admin_stats(client, landlord, tenant, admin):
    tenancy, _ = await portfolio(client, landlord[1])
    response = await client.post(
        "/api/payments",
        json={"tenancy_id": tenancy["id"], "amount": 250, "method": "momo"},
        headers=tenant[1],
    )
    payment_id = response.json()["data"]["id"]
    await client.post(
        "/api/payments",
        json={"tenancy_id": tenancy["id"], "amount": 100, "method": "cash"},
        headers=tenant[1],
    )
    await client.put(
        f"/api/payments/{payment_id}/status",
        json={"status": "completed"},
        headers=landlord[1],
    )

    response = await client.get("/api/dashboards/admin", headers=admin[1])
    assert response.status_code == 200
    stats = response.json()["data"]
    assert stats["total_properties"] == 2
    assert stats["total_units"] == 3
    assert stats["occupied_units"] == 1
    assert stats["occupancy_rate"] == 33
    assert stats["total_tenants"] == 1
    assert stats["total_landlords"] == 1
    assert stats["total_payments"] == 350
    assert stats["completed_payments"] == 250
    assert stats["active_tenancies"] == 1
    assert stats["pending_maintenance"] == 0


@pytest.mark.asyncio
async def test_admin_dashboard_requires_admin(client, landlord):
    response = await client.get("/api/dashboards/admin", headers=landlord[1])
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_landlord_overview(client, landlord, tenant):
    _, let_unit = await portfolio(client, landlord[1])
    await client.post(
        "/api/maintenance-requests",
        json={
            "unit_id": let_unit["id"],
            "title": "No water",
            "description": "Pipes are dry",
            "category": "plumbing",
        },
        headers=tenant[1],
    )

    response = await client.get("/api/dashboards/landlord", headers=landlord[1])
    overview = response.json()["data"]
    assert overview["total_properties"] == 2
    assert overview["total_units"] == 3
    assert overview["occupied_units"] == 1
    assert overview["occupancy_rate"] == 33
    assert overview["potential_monthly_rent"] == 2200
    assert overview["open_maintenance_requests"] == 1
    assert overview["pending_join_requests"] == 0

    by_name = {p["name"]: p for p in overview["properties"]}
    assert by_name["First"]["unit_count"] == 2
    assert by_name["First"]["occupied_count"] == 1
    assert by_name["Second"]["potential_monthly_rent"] == 500


@pytest.mark.asyncio
async def test_tenant_overview(client, landlord, tenant):
    tenancy, _ = await portfolio(client, landlord[1])
    response = await client.post(
        "/api/payments",
        json={"tenancy_id": tenancy["id"], "amount": 600, "method": "card"},
        headers=tenant[1],
    )
    await client.put(
        f"/api/payments/{response.json()['data']['id']}/status",
        json={"status": "completed"},
        headers=landlord[1],
    )

    response = await client.get("/api/dashboards/tenant", headers=tenant[1])
    overview = response.json()["data"]
    assert len(overview["active_tenancies"]) == 1
    assert overview["total_monthly_rent"] == 1000
    assert overview["paid_this_month"] == 600
    assert overview["open_maintenance_requests"] == 0


@pytest.mark.asyncio
async def test_activity_feed_merges_sources(client, landlord, tenant):
    tenancy, let_unit = await portfolio(client, landlord[1])
    await client.post(
        "/api/payments",
        json={"tenancy_id": tenancy["id"], "amount": 100, "method": "momo"},
        headers=tenant[1],
    )
    await client.post(
        "/api/maintenance-requests",
        json={
            "unit_id": let_unit["id"],
            "title": "Fan broken",
            "description": "Ceiling fan stopped",
            "category": "electrical",
        },
        headers=tenant[1],
    )

    response = await client.get(
        "/api/dashboards/activity", params={"limit": 5}, headers=landlord[1]
    )
    assert response.status_code == 200
    items = response.json()["data"]
    assert {item["kind"] for item in items} == {"payment", "maintenance"}
    payment = next(item for item in items if item["kind"] == "payment")
    assert payment["amount"] == 100
    assert payment["title"] == "Payment via momo"

    response = await client.get(
        "/api/dashboards/activity", params={"limit": 1}, headers=tenant[1]
    )
    assert len(response.json()["data"]) == 1
