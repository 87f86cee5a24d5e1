"""API tests for inventory counts."""


async def test_count_lifecycle(async_client, api_prefix, catalog, stock_in, balance_of):
    await stock_in(catalog.depot.id, catalog.bolt.id, 10)

    created = await async_client.post(
        f"{api_prefix}/inventories",
        json={"location_id": catalog.depot.id, "mode": "BY_CATEGORY", "category_id": catalog.hardware.id},
    )
    assert created.status_code == 201
    inventory_id = created.json()["id"]

    generated = await async_client.post(f"{api_prefix}/inventories/{inventory_id}/lines")
    assert generated.json() == {"inventory_id": inventory_id, "lines_created": 2}

    again = await async_client.post(f"{api_prefix}/inventories/{inventory_id}/lines")
    assert again.status_code == 409

    count = (await async_client.get(f"{api_prefix}/inventories/{inventory_id}")).json()
    bolt_line = next(line for line in count["lines"] if line["item_id"] == catalog.bolt.id)
    recorded = await async_client.patch(
        f"{api_prefix}/inventories/{inventory_id}/lines/{bolt_line['id']}",
        json={"counted_qty": 9},
    )
    assert recorded.json()["delta"] == -1

    posted = await async_client.post(
        f"{api_prefix}/inventories/{inventory_id}/post", json={"note": "Monthly count"}
    )
    assert posted.status_code == 200
    assert posted.json()["status"] == "POSTED"
    assert await balance_of(catalog.depot.id, catalog.bolt.id) == 9


async def test_short_post_note(async_client, api_prefix, catalog):
    inventory_id = (
        await async_client.post(f"{api_prefix}/inventories", json={"location_id": catalog.depot.id})
    ).json()["id"]

    response = await async_client.post(
        f"{api_prefix}/inventories/{inventory_id}/post", json={"note": "ok"}
    )

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "note"


async def test_unknown_line(async_client, api_prefix, catalog):
    inventory_id = (
        await async_client.post(f"{api_prefix}/inventories", json={"location_id": catalog.depot.id})
    ).json()["id"]

    response = await async_client.patch(
        f"{api_prefix}/inventories/{inventory_id}/lines/9999", json={"counted_qty": 1}
    )

    assert response.status_code == 404
