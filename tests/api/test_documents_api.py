"""API tests for sales, purchase orders, orders and deliveries."""

import pytest


@pytest.fixture
async def posted_sale(async_client, api_prefix, catalog, stock_in):
    await stock_in(catalog.depot.id, catalog.bolt.id, 10)
    sale = (
        await async_client.post(
            f"{api_prefix}/sales",
            json={"location_id": catalog.depot.id, "lines": [{"item_id": catalog.bolt.id, "qty": 5}]},
        )
    ).json()
    response = await async_client.post(f"{api_prefix}/sales/{sale['id']}/post")
    assert response.status_code == 200
    return response.json()


async def move_delivery(async_client, api_prefix, delivery_id, *statuses):
    response = None
    for status in statuses:
        response = await async_client.post(
            f"{api_prefix}/deliveries/{delivery_id}/status", json={"status": status}
        )
    return response


class TestSalesApi:
    async def test_post_and_cancel(self, async_client, api_prefix, catalog, posted_sale, balance_of):
        assert posted_sale["status"] == "POSTED"
        assert await balance_of(catalog.depot.id, catalog.bolt.id) == 5

        response = await async_client.post(f"{api_prefix}/sales/{posted_sale['id']}/cancel")

        assert response.status_code == 409
        assert response.json()["details"]["current"] == "POSTED"

    async def test_empty_lines_rejected(self, async_client, api_prefix, catalog):
        response = await async_client.post(
            f"{api_prefix}/sales", json={"location_id": catalog.depot.id, "lines": []}
        )
        assert response.status_code == 400

    async def test_unknown_sale(self, async_client, api_prefix, catalog):
        response = await async_client.get(f"{api_prefix}/sales/9999")
        assert response.status_code == 404


class TestDeliveriesApi:
    async def test_sale_delivery_caps_at_sold_quantity(self, async_client, api_prefix, posted_sale):
        line_id = posted_sale["lines"][0]["id"]
        body = {"source": {"kind": "from_sale", "sale_id": posted_sale["id"], "lines": [{"sale_line_id": line_id, "qty": 3}]}}

        created = await async_client.post(f"{api_prefix}/deliveries", json=body)
        assert created.status_code == 201
        delivery = created.json()
        assert delivery["status"] == "DRAFT"
        assert delivery["tracking_token"]

        delivered = await move_delivery(
            async_client, api_prefix, delivery["id"], "PREPARED", "OUT_FOR_DELIVERY", "DELIVERED"
        )
        assert delivered.json()["fulfillment_applied"] is True

        again = await async_client.post(f"{api_prefix}/deliveries", json=body)
        assert again.status_code == 409
        assert again.json()["error_code"] == "CONFLICT"

        sale = (await async_client.get(f"{api_prefix}/sales/{posted_sale['id']}")).json()
        assert sale["lines"][0]["qty_delivered"] == 3

    async def test_unknown_source_kind(self, async_client, api_prefix, catalog):
        response = await async_client.post(
            f"{api_prefix}/deliveries", json={"source": {"kind": "by_drone", "sale_id": 1}}
        )
        assert response.status_code == 422

    async def test_skipping_statuses(self, async_client, api_prefix, posted_sale):
        line_id = posted_sale["lines"][0]["id"]
        delivery = (
            await async_client.post(
                f"{api_prefix}/deliveries",
                json={"source": {"kind": "from_sale", "sale_id": posted_sale["id"], "lines": [{"sale_line_id": line_id, "qty": 1}]}},
            )
        ).json()

        response = await move_delivery(async_client, api_prefix, delivery["id"], "DELIVERED")

        assert response.status_code == 409
        assert "PREPARED" in response.json()["details"]["allowed"]


class TestPurchaseOrdersApi:
    async def test_order_and_receive(self, async_client, api_prefix, catalog, balance_of):
        order = (
            await async_client.post(
                f"{api_prefix}/purchase-orders",
                json={"location_id": catalog.warehouse.id, "lines": [{"item_id": catalog.nut.id, "qty": 8}]},
            )
        ).json()
        assert order["status"] == "DRAFT"

        early = await async_client.post(
            f"{api_prefix}/purchase-orders/{order['id']}/receive",
            json={"lines": [{"item_id": catalog.nut.id, "qty": 8}]},
        )
        assert early.status_code == 409

        await async_client.post(
            f"{api_prefix}/purchase-orders/{order['id']}/status", json={"status": "ORDERED"}
        )
        received = await async_client.post(
            f"{api_prefix}/purchase-orders/{order['id']}/receive",
            json={"lines": [{"item_id": catalog.nut.id, "qty": 8}]},
        )

        assert received.json()["status"] == "RECEIVED"
        assert await balance_of(catalog.warehouse.id, catalog.nut.id) == 8

    async def test_store_rejected(self, async_client, api_prefix, catalog):
        response = await async_client.post(
            f"{api_prefix}/purchase-orders",
            json={"location_id": catalog.store.id, "lines": [{"item_id": catalog.nut.id, "qty": 1}]},
        )
        assert response.status_code == 400


class TestOrdersApi:
    async def test_status_path(self, async_client, api_prefix, catalog):
        order = (
            await async_client.post(
                f"{api_prefix}/orders",
                json={"location_id": catalog.store.id, "lines": [{"item_id": catalog.paint.id, "qty": 2}]},
            )
        ).json()

        confirmed = await async_client.post(
            f"{api_prefix}/orders/{order['id']}/status", json={"status": "CONFIRMED"}
        )
        skipped = await async_client.post(
            f"{api_prefix}/orders/{order['id']}/status", json={"status": "DELIVERED"}
        )

        assert confirmed.json()["status"] == "CONFIRMED"
        assert skipped.status_code == 409
