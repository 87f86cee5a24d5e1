"""Resolving the single in-transit location at startup."""

import pytest

from stockcore.application.services import (
    get_event_bus,
    get_number_allocator,
    get_transit_location,
    reset_services,
    resolve_transit_location,
)
from stockcore.config.settings import Settings, StockSettings
from stockcore.core.entities import LocationKind
from stockcore.core.exceptions import ConfigurationError


async def test_created_once_then_reused(uow_factory):
    first = await resolve_transit_location(uow_factory)
    second = await resolve_transit_location(uow_factory)

    assert first == second
    assert first.code == "TRANSIT"
    async with uow_factory() as uow:
        locations = await uow.master.list_locations(kind=LocationKind.IN_TRANSIT)
    assert len(locations) == 1


async def test_code_mismatch_fails_startup(uow_factory, transit):
    settings = Settings(stock=StockSettings(transit_location_code="IN-TRANSIT"))

    with pytest.raises(ConfigurationError) as exc_info:
        await resolve_transit_location(uow_factory, settings)

    assert exc_info.value.details["setting"] == "stock.transit_location_code"


async def test_cached_until_reset(uow_factory):
    resolved = await get_transit_location(uow_factory)
    assert await get_transit_location() is resolved

    reset_services()
    assert await get_transit_location(uow_factory) == resolved


def test_singletons():
    assert get_event_bus() is get_event_bus()
    assert get_number_allocator() is get_number_allocator()
    assert get_event_bus().handlers_for(object()) == []
