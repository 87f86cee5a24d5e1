"""Concurrent writers against the same balance."""

import asyncio

from stockcore.application.dto.requests import CreateSaleRequest, LineRequest
from stockcore.application.use_cases import CreateSaleUseCase, PostSaleUseCase, SaleQueryUseCase
from stockcore.core.entities import SaleStatus
from stockcore.core.exceptions import InsufficientQuantityError


async def test_competing_sales_never_oversell(engine_context, catalog, stock_in, balance_of):
    """Two sales of 6 against 10 on hand: one posts, the other is refused."""
    await stock_in(catalog.depot.id, catalog.bolt.id, 10)
    create = engine_context.build(CreateSaleUseCase)
    sales = [
        await create.execute(
            CreateSaleRequest(
                location_id=catalog.depot.id, lines=[LineRequest(item_id=catalog.bolt.id, qty=6)]
            )
        )
        for _ in range(2)
    ]

    post = engine_context.build(PostSaleUseCase)
    results = await asyncio.gather(*(post.execute(sale.id) for sale in sales), return_exceptions=True)

    posted = [r for r in results if not isinstance(r, BaseException)]
    refused = [r for r in results if isinstance(r, InsufficientQuantityError)]
    assert len(posted) == 1
    assert len(refused) == 1
    assert await balance_of(catalog.depot.id, catalog.bolt.id) == 4

    statuses = {
        (await engine_context.build(SaleQueryUseCase).get(sale.id)).status for sale in sales
    }
    assert statuses == {SaleStatus.POSTED, SaleStatus.DRAFT}


async def test_parallel_receipts_are_not_lost(catalog, stock_in, balance_of):
    await asyncio.gather(*(stock_in(catalog.depot.id, catalog.nut.id, 1) for _ in range(20)))
    assert await balance_of(catalog.depot.id, catalog.nut.id) == 20
