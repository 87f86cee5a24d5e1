"""API tests for transfers and journeys."""

import pytest


@pytest.fixture
def transfer_body(catalog):
    def _body(destination_id=None, qty=3):
        return {
            "source_location_id": catalog.depot.id,
            "destination_location_id": destination_id or catalog.store.id,
            "lines": [{"item_id": catalog.bolt.id, "qty": qty}],
        }

    return _body


async def test_journey_round_trip(async_client, api_prefix, catalog, transit, stock_in, balance_of, transfer_body):
    await stock_in(catalog.depot.id, catalog.bolt.id, 10)

    created = await async_client.post(f"{api_prefix}/transfers/journeys", json=transfer_body())
    assert created.status_code == 201
    journey = created.json()
    outbound_id = journey["outbound"]["id"]
    inbound_id = journey["inbound"]["id"]
    receipt = {"lines": [{"item_id": catalog.bolt.id, "qty": 3}]}

    assert (await async_client.post(f"{api_prefix}/transfers/{outbound_id}/ship")).status_code == 200
    assert (
        await async_client.post(f"{api_prefix}/transfers/{outbound_id}/receive", json=receipt)
    ).status_code == 200
    assert (
        await async_client.post(f"{api_prefix}/transfers/{inbound_id}/ship", json={"note": "truck 2"})
    ).status_code == 200
    received = await async_client.post(f"{api_prefix}/transfers/{inbound_id}/receive", json=receipt)

    assert received.json()["status"] == "RECEIVED"
    assert await balance_of(catalog.depot.id, catalog.bolt.id) == 7
    assert await balance_of(transit.id, catalog.bolt.id) == 0
    assert await balance_of(catalog.store.id, catalog.bolt.id) == 3

    found = await async_client.get(f"{api_prefix}/transfers/journeys/{journey['journey_id']}")
    assert found.json()["inbound"]["status"] == "RECEIVED"


async def test_inbound_leg_first_is_conflict(async_client, api_prefix, catalog, stock_in, transfer_body):
    await stock_in(catalog.depot.id, catalog.bolt.id, 10)
    journey = (await async_client.post(f"{api_prefix}/transfers/journeys", json=transfer_body())).json()

    response = await async_client.post(f"{api_prefix}/transfers/{journey['inbound']['id']}/ship")

    assert response.status_code == 409
    assert response.json()["error_code"] == "INSUFFICIENT_STOCK"


async def test_over_receipt_is_conflict(async_client, api_prefix, catalog, stock_in, transfer_body):
    await stock_in(catalog.depot.id, catalog.bolt.id, 10)
    transfer = (await async_client.post(f"{api_prefix}/transfers", json=transfer_body())).json()
    await async_client.post(f"{api_prefix}/transfers/{transfer['id']}/ship")

    response = await async_client.post(
        f"{api_prefix}/transfers/{transfer['id']}/receive",
        json={"lines": [{"item_id": catalog.bolt.id, "qty": 4}]},
    )

    assert response.status_code == 409
    assert response.json()["error_code"] == "CONFLICT"


async def test_direct_transfer_and_listing(async_client, api_prefix, catalog, stock_in, transfer_body):
    await stock_in(catalog.depot.id, catalog.bolt.id, 10)

    posted = await async_client.post(
        f"{api_prefix}/transfers/direct", json=transfer_body(catalog.warehouse.id, qty=10)
    )
    listing = await async_client.get(f"{api_prefix}/transfers")

    assert posted.status_code == 201
    assert posted.json()["status"] == "RECEIVED"
    assert listing.json()["total"] == 1


async def test_unknown_transfer(async_client, api_prefix, catalog):
    response = await async_client.get(f"{api_prefix}/transfers/9999")
    assert response.status_code == 404
    assert response.json()["details"] == {"entity": "Transfer", "id": 9999}
