import asyncio

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from conftest import create_property, create_unit, place_tenant
from rentline_backend.core.events import ChangeEvent, ChangeFeed, ChangeType, change_feed
from rentline_backend.main import app
from rentline_backend.modules.auth.jwt_service import create_access_token


def event(row_id: int, *audience: int, table: str = "payments") -> ChangeEvent:
    return ChangeEvent(table, ChangeType.INSERT, row_id, frozenset(audience))


@pytest.mark.asyncio
async def test_events_reach_only_their_audience():
    feed = ChangeFeed(queue_size=5)
    tenant = feed.subscribe(1)
    landlord = feed.subscribe(2)
    admin = feed.subscribe(99, is_admin=True)

    assert feed.publish(event(10, 1, 2)) == 3
    assert feed.publish(event(11, 2)) == 2

    assert (await tenant.get()).row_id == 10
    assert tenant.queue.empty()
    assert [(await landlord.get()).row_id for _ in range(2)] == [10, 11]
    assert admin.queue.qsize() == 2


@pytest.mark.asyncio
async def test_full_queue_drops_oldest():
    feed = ChangeFeed(queue_size=2)
    subscription = feed.subscribe(1)
    for row_id in (1, 2, 3):
        feed.publish(event(row_id, 1))

    assert subscription.dropped == 1
    assert [(await subscription.get()).row_id for _ in range(2)] == [2, 3]


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    feed = ChangeFeed()
    subscription = feed.subscribe(1)
    feed.unsubscribe(subscription)

    assert feed.subscriber_count == 0
    assert feed.publish(event(1, 1)) == 0


def test_event_payload():
    payload = ChangeEvent("units", ChangeType.UPDATE, 4, frozenset({1})).to_dict()
    assert payload == {"table": "units", "event": "UPDATE", "row_id": 4}


@pytest.mark.asyncio
async def test_committed_changes_are_published(client, landlord, tenant):
    landlord_id, landlord_headers = landlord
    tenant_id, _ = tenant
    tenant_sub = change_feed.subscribe(tenant_id)
    landlord_sub = change_feed.subscribe(landlord_id)
    try:
        prop = await create_property(client, landlord_headers)
        unit = await create_unit(client, landlord_headers, prop["id"])
        tenancy = await place_tenant(client, landlord_headers, unit["id"])

        tenant_events = []
        while not tenant_sub.queue.empty():
            tenant_events.append((await tenant_sub.get()).to_dict())
        assert tenant_events == [
            {"table": "tenancies", "event": "INSERT", "row_id": tenancy["id"]}
        ]

        landlord_tables = []
        while not landlord_sub.queue.empty():
            landlord_tables.append((await landlord_sub.get()).table)
        assert landlord_tables == ["properties", "units", "tenancies", "units"]
    finally:
        change_feed.unsubscribe(tenant_sub)
        change_feed.unsubscribe(landlord_sub)


@pytest.mark.asyncio
async def test_failed_operation_publishes_nothing(client, landlord):
    landlord_id, landlord_headers = landlord
    subscription = change_feed.subscribe(landlord_id)
    try:
        response = await client.post(
            "/api/tenancies",
            json={
                "email": "ghost@example.com",
                "unit_id": 12345,
                "rent_amount": 100,
                "start_date": "2026-01-01",
            },
            headers=landlord_headers,
        )
        assert response.status_code == 404
        await asyncio.sleep(0)
        assert subscription.queue.empty()
    finally:
        change_feed.unsubscribe(subscription)


def test_websocket_rejects_invalid_token():
    with TestClient(app) as ws_client:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect("/api/events/ws?token=garbage"):
                pass
    assert exc_info.value.code == 1008


def test_websocket_subscribes_authenticated_user():
    token = create_access_token(42, "ws@example.com", "landlord", "Web Socket")
    with TestClient(app) as ws_client:
        with ws_client.websocket_connect(f"/api/events/ws?token={token}") as websocket:
            assert websocket.receive_json() == {"type": "subscribed", "profile_id": 42}
