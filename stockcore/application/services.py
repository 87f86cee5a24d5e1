"""
Service factory functions for dependency injection.

Wires infrastructure implementations to the core engine. Use cases and
the API import from here; the core layer never does.
"""

from typing import TYPE_CHECKING

from stockcore.config import get_logger, get_settings
from stockcore.core.entities import Location, LocationKind, TransitLocation
from stockcore.core.exceptions import ConfigurationError
from stockcore.core.interfaces import INumberAllocator, UnitOfWorkFactory
from stockcore.core.services import (
    DatedUUIDNumberAllocator,
    EventBus,
    register_delivery_listeners,
)

if TYPE_CHECKING:
    from stockcore.config.settings import Settings
    from stockcore.infrastructure.storage.sqlite import ConnectionPool

logger = get_logger(__name__)


# Singleton instances
_event_bus: EventBus | None = None
_number_allocator: INumberAllocator | None = None
_transit_location: TransitLocation | None = None


async def get_unit_of_work_factory(pool: "ConnectionPool | None" = None) -> UnitOfWorkFactory:
    """
    Get a factory producing one SQLite unit of work per call.

    Args:
        pool: Optional connection pool override (default: global pool)

    Returns:
        Zero-argument callable returning a fresh unit of work
    """
    # Lazy import infrastructure to keep the application layer importable alone
    from stockcore.infrastructure.storage.sqlite import SQLiteUnitOfWork, get_pool

    pool = pool or await get_pool()

    def factory() -> SQLiteUnitOfWork:
        return SQLiteUnitOfWork(pool)

    return factory


def get_event_bus() -> EventBus:
    """Get the process-wide event bus with delivery listeners registered."""
    global _event_bus
    if _event_bus is None:
        _event_bus = register_delivery_listeners(EventBus())
    return _event_bus


def get_number_allocator() -> INumberAllocator:
    global _number_allocator
    if _number_allocator is None:
        _number_allocator = DatedUUIDNumberAllocator()
    return _number_allocator


async def resolve_transit_location(
    uow_factory: UnitOfWorkFactory,
    settings: "Settings | None" = None,
) -> TransitLocation:
    """
    Find or create the single in-transit location.

    Raises:
        ConfigurationError: more than one in-transit location exists, or
            the one that exists has a different code than configured
    """
    settings = settings or get_settings()
    code = settings.stock.transit_location_code

    async with uow_factory() as uow:
        found = await uow.master.list_locations(kind=LocationKind.IN_TRANSIT)
        if len(found) > 1:
            raise ConfigurationError(
                "stock.transit_location_code",
                f"{len(found)} in-transit locations exist, expected exactly one",
            )
        if found:
            location = found[0]
            if location.code != code:
                raise ConfigurationError(
                    "stock.transit_location_code",
                    f"in-transit location has code '{location.code}', configured '{code}'",
                )
        else:
            location = await uow.master.create_location(
                Location(
                    code=code,
                    name=settings.stock.transit_location_name,
                    kind=LocationKind.IN_TRANSIT,
                )
            )
            logger.info("transit_location_created", location_id=location.id, code=code)

    return TransitLocation(id=location.id, code=location.code)


async def get_transit_location(uow_factory: UnitOfWorkFactory | None = None) -> TransitLocation:
    """Get the resolved transit location, resolving it on first use."""
    global _transit_location
    if _transit_location is None:
        factory = uow_factory or await get_unit_of_work_factory()
        _transit_location = await resolve_transit_location(factory)
    return _transit_location


def reset_services() -> None:
    """Reset singletons (for testing)."""
    global _event_bus, _number_allocator, _transit_location
    _event_bus = None
    _number_allocator = None
    _transit_location = None
